from __future__ import annotations

import json
from typing import Any, Sequence

from trackgate.models.canonical import ParameterMap, PayloadEnvelope, SchemaRef, to_map
from trackgate.schema.validator import SchemaValidator
from trackgate.utils.logger_util import get_logger
from trackgate.validation import (
    FailureAccumulator,
    FailureKind,
    NonEmptyList,
    ValidationOutcome,
    invalid,
    valid,
)

logger = get_logger(__name__)


class SchemaValidatingParser:
    """Turns a querystring, a JSON body of events, or both into parameter maps.

    The content checks and the body parse/validate steps stop at the first
    problem. Once the body is known to conform to its schema, every field of
    every event is read and all field errors are reported together.
    """

    def __init__(self, body_schema: SchemaRef, content_types: Sequence[str]) -> None:
        self.body_schema = body_schema
        self.content_types = tuple(content_types)

    @property
    def content_types_str(self) -> str:
        return ", ".join(self.content_types)

    def parse(
        self, envelope: PayloadEnvelope, validator: SchemaValidator
    ) -> ValidationOutcome[NonEmptyList[ParameterMap]]:
        qs_params = to_map(envelope.querystring)
        body, content_type = envelope.body, envelope.content_type

        if body is None and not qs_params:
            return invalid(
                FailureKind.EMPTY_INPUT,
                "Request body and querystring parameters empty, expected at least one populated",
            )
        if content_type is not None and content_type not in self.content_types:
            return invalid(
                FailureKind.CONTENT_TYPE_MISMATCH,
                f"Content type of {content_type} provided, expected one of: {self.content_types_str}",
            )
        if body is not None and content_type is None:
            return invalid(
                FailureKind.CONTENT_TYPE_MISMATCH,
                f"Request body provided but content type empty, expected one of: {self.content_types_str}",
            )
        if body is None and content_type is not None:
            return invalid(
                FailureKind.CONTENT_TYPE_MISMATCH,
                f"Content type of {content_type} provided but request body empty",
            )
        if body is None:
            return valid(NonEmptyList(qs_params))

        return (
            self._extract_json(body)
            .and_then(lambda document: self._validate(document, validator))
            .and_then(lambda document: self._to_parameters(document, qs_params))
        )

    def _extract_json(self, body: str) -> ValidationOutcome[Any]:
        try:
            return valid(json.loads(body))
        except json.JSONDecodeError as exc:
            return invalid(FailureKind.BODY_PARSE_ERROR, f"Body field: invalid JSON [{body}] with parsing error: {exc}")

    def _validate(self, document: Any, validator: SchemaValidator) -> ValidationOutcome[Any]:
        try:
            return validator.validate(document, self.body_schema)
        except Exception as exc:
            logger.exception("Schema validator raised while checking %s", self.body_schema.uri)
            return invalid(FailureKind.SCHEMA_VIOLATION, f"Could not validate body against {self.body_schema.uri}: {exc}")

    def _to_parameters(
        self, document: Any, merge_with: ParameterMap
    ) -> ValidationOutcome[NonEmptyList[ParameterMap]]:
        events = document if isinstance(document, list) else [document]
        accumulator: FailureAccumulator[ParameterMap] = FailureAccumulator()

        for index, event in enumerate(events):
            if not isinstance(event, dict):
                accumulator.record(FailureKind.FIELD_TYPE_ERROR, f"Event at index {index} is not a JSON object")
                continue
            params: ParameterMap = {}
            for key, value in event.items():
                if isinstance(value, str):
                    params[key] = value
                elif value is None:
                    accumulator.record(FailureKind.FIELD_TYPE_ERROR, f"Value for key {key} is a null String")
                else:
                    accumulator.record(FailureKind.FIELD_TYPE_ERROR, f"Value for key {key} is not a String")
            # querystring values win on collision
            accumulator.successes.append({**params, **merge_with})

        failed = accumulator.to_invalid()
        if failed is not None:
            return failed
        merged = NonEmptyList.from_iterable(accumulator.successes)
        if merged is None:
            return invalid(
                FailureKind.EMPTY_EVENT_BATCH,
                "List of events is empty, unexpected: the body schema contract may have changed",
            )
        return valid(merged)
