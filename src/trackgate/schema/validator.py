from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Protocol

from jsonschema import Draft4Validator
from jsonschema.exceptions import SchemaError, ValidationError
from jsonschema.validators import validator_for

from trackgate.models.canonical import SchemaRef
from trackgate.schema.builtin import BUILTIN_SCHEMAS
from trackgate.utils.logger_util import get_logger
from trackgate.validation import Failure, FailureKind, Invalid, NonEmptyList, ValidationOutcome, invalid, valid

logger = get_logger(__name__)


class SchemaValidator(Protocol):
    def validate(self, document: Any, schema_ref: SchemaRef) -> ValidationOutcome[Any]:
        """Check a parsed JSON document against the schema named by ``schema_ref``."""


def _render_path(error: ValidationError) -> str:
    rendered = "$"
    for part in error.absolute_path:
        rendered += f"[{part}]" if isinstance(part, int) else f".{part}"
    return rendered


def _error_sort_key(error: ValidationError) -> tuple[tuple[str, ...], str]:
    return tuple(str(part) for part in error.absolute_path), error.message


class JsonSchemaValidator:
    """In-process schema registry backed by the ``jsonschema`` library.

    Schemas are keyed by their ``iglu:`` URI. The bundled schemas are
    registered up front; more can be added one by one or loaded from a
    directory laid out as ``vendor/name/format/version``.
    """

    def __init__(self, schemas: Mapping[SchemaRef, dict[str, Any]] | None = None, include_builtin: bool = True) -> None:
        self._schemas: dict[str, dict[str, Any]] = {}
        if include_builtin:
            for schema_ref, schema in BUILTIN_SCHEMAS.items():
                self.register(schema_ref, schema)
        for schema_ref, schema in (schemas or {}).items():
            self.register(schema_ref, schema)

    def register(self, schema_ref: SchemaRef, schema: dict[str, Any]) -> None:
        self._schemas[schema_ref.uri] = schema

    def load_directory(self, root: Path) -> int:
        loaded = 0
        for path in sorted(root.glob("*/*/*/*")):
            if not path.is_file():
                continue
            vendor, name, schema_format, version = path.relative_to(root).parts
            try:
                schema = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                raise ValueError(f"Schema file {path} is not valid JSON: {exc}") from exc
            self.register(SchemaRef(vendor=vendor, name=name, format=schema_format, version=version), schema)
            loaded += 1
        logger.info("Loaded %d schema(s) from %s", loaded, root)
        return loaded

    def known_schemas(self) -> list[str]:
        return sorted(self._schemas)

    def validate(self, document: Any, schema_ref: SchemaRef) -> ValidationOutcome[Any]:
        schema = self._schemas.get(schema_ref.uri)
        if schema is None:
            return invalid(FailureKind.SCHEMA_VIOLATION, f"Could not find schema with key {schema_ref.uri}")

        validator_cls = validator_for(schema, default=Draft4Validator)
        try:
            validator_cls.check_schema(schema)
        except SchemaError as exc:
            return invalid(FailureKind.SCHEMA_VIOLATION, f"Schema {schema_ref.uri} is malformed: {exc.message}")

        errors = sorted(validator_cls(schema).iter_errors(document), key=_error_sort_key)
        failures = NonEmptyList.from_iterable(
            Failure(FailureKind.SCHEMA_VIOLATION, f"{_render_path(error)}: {error.message}") for error in errors
        )
        if failures is not None:
            return Invalid(failures)
        return valid(document)
