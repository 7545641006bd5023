from __future__ import annotations

from typing import Iterable, Protocol

from trackgate.models.canonical import RawEvent


class EventSink(Protocol):
    """Downstream hand-off for accepted raw events."""

    def publish_many(self, events: Iterable[RawEvent]) -> None: ...

    def close(self) -> None: ...
