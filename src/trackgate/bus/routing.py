from __future__ import annotations

from trackgate.models.canonical import RawEvent

RAW_TOPIC_PREFIX = "raw"


def topic_for(event: RawEvent) -> str:
    return f"{RAW_TOPIC_PREFIX}.{event.api.vendor}"
