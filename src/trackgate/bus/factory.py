from __future__ import annotations

import os

from trackgate.bus.fanout import FanoutBus
from trackgate.bus.in_memory import InMemoryBus
from trackgate.bus.kafka import KafkaBus
from trackgate.bus.sink import EventSink

SUPPORTED_BACKENDS = ("memory", "kafka")


def _backends_from_env() -> list[str]:
    raw = os.getenv("TRACKGATE_BUS_BACKEND", "memory")
    backends: list[str] = []
    for name in (part.strip().lower() for part in raw.split(",")):
        if not name or name in backends:
            continue
        if name not in SUPPORTED_BACKENDS:
            raise ValueError(f"Unsupported TRACKGATE_BUS_BACKEND {name!r}. Use 'memory', 'kafka' or 'memory,kafka'.")
        backends.append(name)
    if not backends:
        raise ValueError("TRACKGATE_BUS_BACKEND names no backend")
    return backends


def _build_backend(name: str) -> EventSink:
    if name == "kafka":
        return KafkaBus(
            bootstrap_servers=os.getenv("TRACKGATE_KAFKA_BOOTSTRAP_SERVERS", "127.0.0.1:9092"),
            client_id=os.getenv("TRACKGATE_KAFKA_CLIENT_ID", "trackgate-producer"),
        )
    return InMemoryBus(retain=int(os.getenv("TRACKGATE_MEMORY_RETAIN", "1000")))


def build_sink_from_env() -> EventSink:
    """Build the sink named by TRACKGATE_BUS_BACKEND, fanning out when it lists several."""
    sinks = [_build_backend(name) for name in _backends_from_env()]
    if len(sinks) == 1:
        return sinks[0]
    return FanoutBus(sinks)
