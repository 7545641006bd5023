from __future__ import annotations

from abc import ABC, abstractmethod

from trackgate.models.canonical import ParameterMap, PayloadEnvelope, RawEvent
from trackgate.schema.validator import SchemaValidator
from trackgate.validation import NonEmptyList, ValidationOutcome


class Adapter(ABC):
    vendor: str
    version: str

    @abstractmethod
    def to_raw_events(
        self, envelope: PayloadEnvelope, validator: SchemaValidator
    ) -> ValidationOutcome[NonEmptyList[RawEvent]]:
        """Normalize one inbound envelope to one or more raw events."""

    @staticmethod
    def wrap(envelope: PayloadEnvelope, parameters: ParameterMap) -> RawEvent:
        return RawEvent(
            api=envelope.api,
            parameters=parameters,
            content_type=envelope.content_type,
            source=envelope.source,
            context=envelope.context,
        )
