from .callrail import CallrailAdapter
from .tracker_protocol import TrackerProtocolAdapter

__all__ = [
    "CallrailAdapter",
    "TrackerProtocolAdapter",
]
