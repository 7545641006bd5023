from __future__ import annotations

from typing import Iterable

from trackgate.bus.sink import EventSink
from trackgate.models.canonical import RawEvent


class FanoutBus:
    """Hands every batch to each sink in turn."""

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self.sinks = list(sinks)

    def publish_many(self, events: Iterable[RawEvent]) -> None:
        batch = list(events)
        for sink in self.sinks:
            sink.publish_many(batch)

    def close(self) -> None:
        for sink in self.sinks:
            sink.close()
