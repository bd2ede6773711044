"""Server-Sent Events assembly.

Groups text lines into events and decodes each event's data as JSON.

Framing rules:
- ``:`` starts a comment line, which is ignored.
- ``data:`` lines contribute to the current event. Exactly five characters
  (``len("data:")``) are stripped from each line; the conventional space after
  the colon is left in place and removed by the trim applied to the joined
  payload. A payload that begins with significant whitespace on a
  continuation line therefore keeps that whitespace.
- Other fields (``event:``, ``id:``, ``retry:``) are ignored.
- A blank line dispatches the event. Data fragments are joined with no
  separator, so JSON split over several ``data:`` lines is reassembled as-is.
- Events whose payload is not valid JSON are dropped.
"""

from __future__ import annotations

import contextlib
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

logger = logging.getLogger(__name__)

COMMENT_MARKER = ":"
DATA_PREFIX = "data:"
DATA_PREFIX_WIDTH = len(DATA_PREFIX)


class EventAssembler:
    """Incremental lines-to-JSON event decoder.

    ``feed`` and ``flush`` return the events completed by their input, the
    same way ``LineDecoder`` returns lines: an empty list when no event
    ended, otherwise one decoded value. A JSON ``null`` payload is an event
    like any other.
    """

    def __init__(self) -> None:
        self._fragments: list[str] = []

    def feed(self, line: str) -> list[Any]:
        """Consume one line; return the event it completes, if any."""
        if not line:
            return self._dispatch()
        if line.startswith(COMMENT_MARKER):
            return []
        if line.startswith(DATA_PREFIX):
            self._fragments.append(line[DATA_PREFIX_WIDTH:])
        return []

    def flush(self) -> list[Any]:
        """Dispatch an event left open at end of input."""
        return self._dispatch()

    def _dispatch(self) -> list[Any]:
        if not self._fragments:
            return []
        data = "".join(self._fragments).strip()
        self._fragments = []
        if not data:
            return []
        try:
            return [json.loads(data)]
        except json.JSONDecodeError as e:
            logger.debug(f"Dropping malformed SSE event: {e} (data: {data[:80]})")
            return []


async def aiter_events(lines: AsyncIterable[str]) -> AsyncIterator[Any]:
    """Lazily yield one decoded JSON value per event."""
    assembler = EventAssembler()
    async with contextlib.aclosing(lines.__aiter__()) as source:
        async for line in source:
            for event in assembler.feed(line):
                yield event
    for event in assembler.flush():
        yield event
