"""Streaming pipeline: bytes → lines → events → classified frames."""

from .events import DATA_PREFIX, DATA_PREFIX_WIDTH, EventAssembler, aiter_events
from .frames import DONE_FRAME_TYPE, FrameStream, StreamState
from .lines import LineDecoder, aiter_lines

__all__ = [
    "DATA_PREFIX",
    "DATA_PREFIX_WIDTH",
    "DONE_FRAME_TYPE",
    "EventAssembler",
    "FrameStream",
    "LineDecoder",
    "StreamState",
    "aiter_events",
    "aiter_lines",
]
