from __future__ import annotations

import os
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any

from trackgate.bus import EventSink, build_sink_from_env
from trackgate.bus.routing import topic_for
from trackgate.models.canonical import PayloadEnvelope, RawEvent
from trackgate.pipeline import AdapterRegistry, ingest
from trackgate.schema.validator import JsonSchemaValidator
from trackgate.validation import Invalid, NonEmptyList, ValidationOutcome


def _schema_dir_from_env() -> Path | None:
    raw = os.getenv("TRACKGATE_SCHEMA_DIR", "").strip()
    return Path(raw) if raw else None


class CollectorRuntime:
    def __init__(self, schema_dir: Path | None = None, sink: EventSink | None = None) -> None:
        self.validator = JsonSchemaValidator()
        schema_dir = schema_dir or _schema_dir_from_env()
        if schema_dir is not None:
            self.validator.load_directory(schema_dir)
        self.registry = AdapterRegistry()
        self.sink = sink if sink is not None else build_sink_from_env()
        self._counts: Counter[str] = Counter()
        self._topic_counts: Counter[str] = Counter()
        self._counts_lock = Lock()

    def ingest(self, envelope: PayloadEnvelope) -> ValidationOutcome[NonEmptyList[RawEvent]]:
        outcome = ingest(envelope, self.validator, self.sink, registry=self.registry)
        with self._counts_lock:
            if isinstance(outcome, Invalid):
                self._counts["rejected_payloads"] += 1
            else:
                self._counts["accepted_payloads"] += 1
                self._counts["raw_events"] += len(outcome.value)
                self._topic_counts.update(topic_for(event) for event in outcome.value)
        return outcome

    def summary(self) -> dict[str, Any]:
        with self._counts_lock:
            counts = dict(self._counts)
            topics = dict(sorted(self._topic_counts.items()))
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "bus_backend": os.getenv("TRACKGATE_BUS_BACKEND", "memory").strip().lower(),
            "channels": [
                {"vendor": channel.vendor, "version": channel.version, "name": channel.name, "delivery": channel.delivery}
                for channel in self.registry.channels
            ],
            "schemas": self.validator.known_schemas(),
            "accepted_payloads": counts.get("accepted_payloads", 0),
            "rejected_payloads": counts.get("rejected_payloads", 0),
            "raw_events": counts.get("raw_events", 0),
            "topics": topics,
        }

    def close(self) -> None:
        self.sink.close()
