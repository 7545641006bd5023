from .factory import build_sink_from_env
from .fanout import FanoutBus
from .in_memory import InMemoryBus
from .kafka import KafkaBus
from .sink import EventSink

__all__ = ["EventSink", "InMemoryBus", "KafkaBus", "FanoutBus", "build_sink_from_env"]
