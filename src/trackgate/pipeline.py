from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from trackgate.adapters import CallrailAdapter, TrackerProtocolAdapter
from trackgate.adapters.base import Adapter
from trackgate.bus.sink import EventSink
from trackgate.models.canonical import PayloadEnvelope, RawEvent
from trackgate.schema.validator import SchemaValidator
from trackgate.utils.logger_util import get_logger
from trackgate.validation import FailureKind, Invalid, NonEmptyList, ValidationOutcome, invalid

logger = get_logger(__name__)


@dataclass(frozen=True)
class SourceChannel:
    vendor: str
    version: str
    name: str
    delivery: str
    adapter_cls: type[Adapter]


SOURCE_CHANNELS = [
    SourceChannel(
        vendor=TrackerProtocolAdapter.vendor,
        version=TrackerProtocolAdapter.version,
        name="Tracker protocol v2",
        delivery="GET querystring or POST JSON batch",
        adapter_cls=TrackerProtocolAdapter,
    ),
    SourceChannel(
        vendor=CallrailAdapter.vendor,
        version=CallrailAdapter.version,
        name="CallRail call complete",
        delivery="Webhook querystring",
        adapter_cls=CallrailAdapter,
    ),
]


class AdapterRegistry:
    def __init__(self, channels: Iterable[SourceChannel] = SOURCE_CHANNELS) -> None:
        self.channels = list(channels)
        self._adapters: dict[tuple[str, str], Adapter] = {
            (channel.vendor, channel.version): channel.adapter_cls() for channel in self.channels
        }

    def lookup(self, vendor: str, version: str) -> Adapter | None:
        return self._adapters.get((vendor, version))

    def to_raw_events(
        self, envelope: PayloadEnvelope, validator: SchemaValidator
    ) -> ValidationOutcome[NonEmptyList[RawEvent]]:
        adapter = self.lookup(envelope.api.vendor, envelope.api.version)
        if adapter is None:
            return invalid(
                FailureKind.UNSUPPORTED_API,
                f"Payload with vendor {envelope.api.vendor} and version {envelope.api.version} not supported",
            )
        return adapter.to_raw_events(envelope, validator)


def ingest(
    envelope: PayloadEnvelope,
    validator: SchemaValidator,
    sink: EventSink,
    registry: AdapterRegistry | None = None,
) -> ValidationOutcome[NonEmptyList[RawEvent]]:
    """Normalize an envelope and hand the resulting raw events to the sink.

    Rejections are logged and returned; nothing is published for them.
    """
    outcome = (registry or AdapterRegistry()).to_raw_events(envelope, validator)
    if isinstance(outcome, Invalid):
        logger.info(
            "Rejected %s/%s payload from %s: %s",
            envelope.api.vendor,
            envelope.api.version,
            envelope.source.name,
            "; ".join(outcome.messages),
        )
        return outcome
    sink.publish_many(outcome.value)
    logger.debug("Published %d raw event(s) for %s/%s", len(outcome.value), envelope.api.vendor, envelope.api.version)
    return outcome
