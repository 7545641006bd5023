from __future__ import annotations

from trackgate.adapters.base import Adapter
from trackgate.adapters.body_parser import SchemaValidatingParser
from trackgate.models.canonical import PayloadEnvelope, RawEvent
from trackgate.schema.builtin import PAYLOAD_DATA
from trackgate.schema.validator import SchemaValidator
from trackgate.validation import NonEmptyList, ValidationOutcome


class TrackerProtocolAdapter(Adapter):
    """Version 2 of the tracker protocol: GET or POST, events may also ride on the querystring."""

    vendor = "com.snowplowanalytics.snowplow"
    version = "tp2"

    content_types = (
        "application/json",
        "application/json; charset=utf-8",
        "application/json; charset=UTF-8",
    )
    body_schema = PAYLOAD_DATA

    def __init__(self) -> None:
        self._parser = SchemaValidatingParser(self.body_schema, self.content_types)

    def to_raw_events(
        self, envelope: PayloadEnvelope, validator: SchemaValidator
    ) -> ValidationOutcome[NonEmptyList[RawEvent]]:
        return self._parser.parse(envelope, validator).map(
            lambda params_list: params_list.map(lambda params: self.wrap(envelope, params))
        )
