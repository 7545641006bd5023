from __future__ import annotations

import json
from typing import Any, Iterable

from kafka import KafkaProducer

from trackgate.bus.routing import topic_for
from trackgate.models.canonical import RawEvent


def _record(event: RawEvent) -> tuple[str, str, dict[str, Any]]:
    # partitioned by collector name
    return topic_for(event), event.source.name, event.model_dump(mode="json")


class KafkaBus:
    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str = "trackgate-producer",
        producer: KafkaProducer | None = None,
    ) -> None:
        self._owns_producer = producer is None
        self._producer = producer or KafkaProducer(
            bootstrap_servers=bootstrap_servers,
            client_id=client_id,
            linger_ms=10,
            acks="all",
            value_serializer=lambda payload: json.dumps(payload).encode("utf-8"),
            key_serializer=lambda key: key.encode("utf-8"),
        )

    def publish_many(self, events: Iterable[RawEvent]) -> None:
        """Send a whole batch and wait until the broker has it."""
        for topic, key, value in map(_record, events):
            self._producer.send(topic, key=key, value=value)
        self._producer.flush()

    def close(self) -> None:
        if self._owns_producer:
            self._producer.flush()
            self._producer.close()
