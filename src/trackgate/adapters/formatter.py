from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from trackgate.models.canonical import ParameterMap, SchemaRef
from trackgate.schema.builtin import UNSTRUCT_EVENT
from trackgate.utils.logger_util import get_logger
from trackgate.validation import FailureAccumulator, FailureKind, ValidationOutcome, valid

logger = get_logger(__name__)

TRUTHY = frozenset({"true", "t", "yes", "y", "on", "1"})
FALSY = frozenset({"false", "f", "no", "n", "off", "0"})

_CANONICAL_DATETIME = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}\.[0-9]{3}Z$")
CANONICAL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
_INTEGER = re.compile(r"^[+-]?[0-9]+$")

# Tracker-level keys, kept out of the structured event data
RESERVED_KEYS = ("nuid", "aid", "cv", "p")
ACCEPTED_QUERY_PARAMETERS = ("nuid", "aid", "cv", "eid", "ttm", "url")

_JODA_TOKEN = re.compile(r"'[^']*'|y+|M+|d+|H+|h+|m+|s+|S+|a|Z+|[A-Za-z]|.")
_JODA_DIRECTIVES = {
    "yyyy": "%Y",
    "yy": "%y",
    "MMMM": "%B",
    "MMM": "%b",
    "MM": "%m",
    "M": "%m",
    "dd": "%d",
    "d": "%d",
    "HH": "%H",
    "H": "%H",
    "hh": "%I",
    "h": "%I",
    "mm": "%M",
    "m": "%M",
    "ss": "%S",
    "s": "%S",
    "SSS": "%f",
    "a": "%p",
    "Z": "%z",
    "ZZ": "%z",
}


def joda_to_strptime(pattern: str) -> str:
    """Translate a Joda/Java style datetime pattern into strptime directives."""
    translated: list[str] = []
    for token in _JODA_TOKEN.findall(pattern):
        if token.startswith("'"):
            literal = token[1:-1] or "'"
            translated.append(literal.replace("%", "%%"))
        elif token[0].isalpha():
            if token not in _JODA_DIRECTIVES:
                raise ValueError(f"Unsupported datetime pattern token {token!r} in {pattern!r}")
            translated.append(_JODA_DIRECTIVES[token])
        else:
            translated.append(token.replace("%", "%%"))
    return "".join(translated)


def to_canonical_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class DateTimeFields:
    keys: tuple[str, ...]
    pattern: str
    strptime_format: str = field(init=False)

    def __post_init__(self) -> None:
        if not self.keys:
            raise ValueError("DateTimeFields needs at least one key")
        object.__setattr__(self, "strptime_format", joda_to_strptime(self.pattern))


@dataclass(frozen=True)
class FieldTypePlan:
    booleans: tuple[str, ...] = ()
    integers: tuple[str, ...] = ()
    datetimes: DateTimeFields | None = None

    def __post_init__(self) -> None:
        datetime_keys = self.datetimes.keys if self.datetimes else ()
        groups = [set(self.booleans), set(self.integers), set(datetime_keys)]
        for i, left in enumerate(groups):
            for right in groups[i + 1:]:
                overlap = left & right
                if overlap:
                    raise ValueError(f"Field type plan lists {sorted(overlap)} under more than one type")


class CoercionPolicy(str, Enum):
    DROP = "drop"
    FAIL = "fail"


class _Unparseable(Exception):
    pass


class ParameterCoercionFormatter:
    """Retypes raw string parameters according to a field type plan.

    A listed field whose value cannot be read as its declared type is
    dropped under ``CoercionPolicy.DROP`` and reported under
    ``CoercionPolicy.FAIL``. Unlisted fields pass through untouched.
    """

    def __init__(self, plan: FieldTypePlan, policy: CoercionPolicy = CoercionPolicy.DROP) -> None:
        self.plan = plan
        self.policy = policy

    def coerce(self, params: ParameterMap) -> ValidationOutcome[dict[str, Any]]:
        accumulator: FailureAccumulator[tuple[str, Any]] = FailureAccumulator()
        for key, value in params.items():
            try:
                accumulator.successes.append((key, self._coerce_value(key, value)))
            except _Unparseable as exc:
                if self.policy is CoercionPolicy.FAIL:
                    accumulator.record(FailureKind.COERCION_FAILURE, str(exc))
                else:
                    logger.debug("Dropping field: %s", exc)

        failed = accumulator.to_invalid()
        if failed is not None:
            return failed
        return valid(dict(accumulator.successes))

    def format(self, params: ParameterMap) -> ValidationOutcome[ParameterMap]:
        return self.coerce(params).map(lambda typed: {key: _render(value) for key, value in typed.items()})

    def to_structured_event_params(
        self,
        tracker_version: str,
        params: ParameterMap,
        schema_ref: SchemaRef,
        platform: str,
    ) -> ValidationOutcome[ParameterMap]:
        """Repackage vendor fields as a self-describing structured event."""
        vendor_fields = {key: value for key, value in params.items() if key not in RESERVED_KEYS}

        def package(typed: dict[str, Any]) -> ParameterMap:
            envelope = {"schema": UNSTRUCT_EVENT.uri, "data": {"schema": schema_ref.uri, "data": typed}}
            packaged: ParameterMap = {
                "tv": tracker_version,
                "e": "ue",
                "p": params.get("p", platform),
                "ue_pr": json.dumps(envelope, separators=(",", ":")),
            }
            packaged.update({key: params[key] for key in ACCEPTED_QUERY_PARAMETERS if key in params})
            return packaged

        return self.coerce(vendor_fields).map(package)

    def _coerce_value(self, key: str, value: str) -> Any:
        if value == "":
            return None
        if key in self.plan.booleans:
            lowered = value.strip().lower()
            if lowered in TRUTHY:
                return True
            if lowered in FALSY:
                return False
            raise _Unparseable(f"Value {value!r} for boolean field {key} is not a recognised boolean")
        if key in self.plan.integers:
            if _INTEGER.match(value.strip()):
                return int(value)
            raise _Unparseable(f"Value {value!r} for integer field {key} is not an integer")
        datetimes = self.plan.datetimes
        if datetimes is not None and key in datetimes.keys:
            if _CANONICAL_DATETIME.match(value):
                try:
                    datetime.strptime(value, CANONICAL_DATETIME_FORMAT)
                except ValueError as exc:
                    raise _Unparseable(f"Value {value!r} for datetime field {key} is not a real datetime") from exc
                return value
            try:
                parsed = datetime.strptime(value, datetimes.strptime_format)
            except ValueError as exc:
                raise _Unparseable(
                    f"Value {value!r} for datetime field {key} does not match pattern {datetimes.pattern}"
                ) from exc
            return to_canonical_datetime(parsed)
        return value


def _render(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)
