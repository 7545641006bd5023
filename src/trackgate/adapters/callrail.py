from __future__ import annotations

from trackgate.adapters.base import Adapter
from trackgate.adapters.formatter import (
    CoercionPolicy,
    DateTimeFields,
    FieldTypePlan,
    ParameterCoercionFormatter,
)
from trackgate.models.canonical import PayloadEnvelope, RawEvent, to_map
from trackgate.schema.builtin import CALLRAIL_CALL_COMPLETE
from trackgate.schema.validator import SchemaValidator
from trackgate.validation import FailureKind, NonEmptyList, ValidationOutcome, invalid


class CallrailAdapter(Adapter):
    """CallRail call-complete webhook: a single event carried on the querystring.

    Fields that fail to coerce are dropped, CallRail does not guarantee its formats.
    """

    vendor = "com.callrail"
    version = "v1"

    tracker_version = "com.callrail-v1"
    platform = "srv"
    schema = CALLRAIL_CALL_COMPLETE
    field_plan = FieldTypePlan(
        booleans=("first_call", "answered"),
        integers=("duration",),
        datetimes=DateTimeFields(keys=("datetime",), pattern="yyyy-MM-dd HH:mm:ss"),
    )
    coercion_policy = CoercionPolicy.DROP

    def __init__(self) -> None:
        self._formatter = ParameterCoercionFormatter(self.field_plan, self.coercion_policy)

    def to_raw_events(
        self, envelope: PayloadEnvelope, validator: SchemaValidator
    ) -> ValidationOutcome[NonEmptyList[RawEvent]]:
        params = to_map(envelope.querystring)
        if not params:
            return invalid(FailureKind.EMPTY_INPUT, "Querystring is empty: no CallRail event to process")
        return self._formatter.to_structured_event_params(
            self.tracker_version, params, self.schema, self.platform
        ).map(lambda structured: NonEmptyList(self.wrap(envelope, structured)))
