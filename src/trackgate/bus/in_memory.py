from __future__ import annotations

from collections import deque
from threading import Lock
from typing import Iterable

from trackgate.bus.routing import topic_for
from trackgate.models.canonical import RawEvent


class InMemoryBus:
    """Keeps only the most recent ``retain`` events of each topic."""

    def __init__(self, retain: int = 1000) -> None:
        if retain < 1:
            raise ValueError("InMemoryBus needs to retain at least one event per topic")
        self.retain = retain
        self._topics: dict[str, deque[RawEvent]] = {}
        self._lock = Lock()

    def publish_many(self, events: Iterable[RawEvent]) -> None:
        with self._lock:
            for event in events:
                topic = topic_for(event)
                if topic not in self._topics:
                    self._topics[topic] = deque(maxlen=self.retain)
                self._topics[topic].append(event)

    def recent(self, topic: str) -> list[RawEvent]:
        with self._lock:
            return list(self._topics.get(topic, ()))

    def topic_names(self) -> list[str]:
        with self._lock:
            return sorted(self._topics)

    def close(self) -> None:
        with self._lock:
            self._topics.clear()
