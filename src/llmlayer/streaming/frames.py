"""Stream consumption: classify decoded events into frames.

The stream is ``OPEN`` until either an error frame arrives (``ERRORED``, the
error is raised and nothing after it is read) or a ``done`` frame arrives
(``ENDED``, the frame is yielded and reading stops). Running out of input
while still open simply ends the sequence. However the stream stops, the
event source is closed before control returns to the caller.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterable, AsyncIterator
from enum import Enum
from typing import Any

from ..classify import classify

logger = logging.getLogger(__name__)

DONE_FRAME_TYPE = "done"


class StreamState(str, Enum):
    OPEN = "open"
    ERRORED = "errored"
    ENDED = "ended"


class FrameStream:
    """Async iterator of classified stream frames.

    Args:
        events: Decoded JSON events, in source order.
        correlation_id: Upstream request id added to error messages.
    """

    def __init__(
        self,
        events: AsyncIterable[Any],
        correlation_id: str | None = None,
    ) -> None:
        self._events = events
        self._correlation_id = correlation_id
        self.state = StreamState.OPEN
        self.frames_seen = 0

    async def __aiter__(self) -> AsyncIterator[Any]:
        if self.state is not StreamState.OPEN:
            return
        async with contextlib.aclosing(self._events.__aiter__()) as events:
            async for event in events:
                record = classify(event, correlation_id=self._correlation_id)
                if record is not None:
                    self.state = StreamState.ERRORED
                    logger.warning(
                        f"Stream error after {self.frames_seen} frames: "
                        f"{record.kind.value}: {record.message}"
                    )
                    raise record.to_exception()

                self.frames_seen += 1
                if isinstance(event, dict) and event.get("type") == DONE_FRAME_TYPE:
                    self.state = StreamState.ENDED
                    yield event
                    return
                yield event

        logger.debug(f"Stream ended without a completion frame ({self.frames_seen} frames)")
