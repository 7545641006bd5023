from __future__ import annotations

import json

from trackgate.bus.in_memory import InMemoryBus
from trackgate.models.canonical import CollectorApi, PayloadEnvelope, PayloadSource
from trackgate.pipeline import SOURCE_CHANNELS, AdapterRegistry, ingest
from trackgate.schema.validator import JsonSchemaValidator
from trackgate.validation import FailureKind, Invalid, Valid


def make_envelope(vendor: str, version: str, **kwargs) -> PayloadEnvelope:
    return PayloadEnvelope(
        api=CollectorApi(vendor=vendor, version=version),
        source=PayloadSource(name="test-collector"),
        **kwargs,
    )


def test_registry_knows_every_source_channel() -> None:
    registry = AdapterRegistry()

    for channel in SOURCE_CHANNELS:
        adapter = registry.lookup(channel.vendor, channel.version)
        assert isinstance(adapter, channel.adapter_cls)


def test_unknown_api_is_rejected() -> None:
    outcome = AdapterRegistry().to_raw_events(
        make_envelope("com.unknown", "v9", querystring=(("e", "pv"),)), JsonSchemaValidator()
    )

    assert isinstance(outcome, Invalid)
    assert outcome.kinds == [FailureKind.UNSUPPORTED_API]
    assert outcome.messages == ["Payload with vendor com.unknown and version v9 not supported"]


def test_ingest_publishes_batch_to_vendor_topic() -> None:
    bus = InMemoryBus()
    body = json.dumps([{"tv": "py-1.0", "p": "srv", "e": "se"}, {"tv": "py-1.0", "p": "srv", "e": "pv"}])
    envelope = make_envelope(
        "com.snowplowanalytics.snowplow", "tp2", body=body, content_type="application/json"
    )

    outcome = ingest(envelope, JsonSchemaValidator(), bus)

    assert isinstance(outcome, Valid)
    assert [event.parameters["e"] for event in bus.recent("raw.com.snowplowanalytics.snowplow")] == ["se", "pv"]


def test_ingest_publishes_nothing_for_rejected_payload() -> None:
    bus = InMemoryBus()
    envelope = make_envelope("com.callrail", "v1")

    outcome = ingest(envelope, JsonSchemaValidator(), bus)

    assert isinstance(outcome, Invalid)
    assert outcome.kinds == [FailureKind.EMPTY_INPUT]
    assert bus.topic_names() == []
