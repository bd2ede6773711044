"""Line framing for streamed response bodies.

Turns raw byte chunks, split at arbitrary offsets, into text lines. Decoding
is incremental so multi-byte characters split across chunks survive, and a
line is only released once its terminator has been seen in full.
"""

from __future__ import annotations

import codecs
import contextlib
from collections.abc import AsyncIterable, AsyncIterator


class LineDecoder:
    """Incremental bytes-to-lines decoder.

    ``\\n`` and ``\\r\\n`` both terminate a line; terminators are stripped.
    A ``\\r`` at the very end of the buffered text is held back until the next
    chunk shows whether it starts a ``\\r\\n`` pair.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)("replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[str]:
        """Decode a chunk and return every line it completes."""
        self._buffer += self._decoder.decode(chunk)
        return self._drain()

    def flush(self) -> list[str]:
        """Finish decoding and return remaining lines, including an unterminated tail."""
        self._buffer += self._decoder.decode(b"", final=True)
        lines = self._drain()
        if self._buffer:
            tail = self._buffer
            self._buffer = ""
            lines.append(tail[:-1] if tail.endswith("\r") else tail)
        return lines

    def _drain(self) -> list[str]:
        lines: list[str] = []
        while True:
            idx = self._buffer.find("\n")
            if idx < 0:
                break
            line = self._buffer[:idx]
            self._buffer = self._buffer[idx + 1 :]
            if line.endswith("\r"):
                line = line[:-1]
            lines.append(line)
        return lines


async def aiter_lines(
    chunks: AsyncIterable[bytes],
    encoding: str = "utf-8",
) -> AsyncIterator[str]:
    """Lazily yield text lines from an async byte-chunk source.

    A fresh decoder is created per call, so the source is only read as fast
    as lines are requested.
    """
    decoder = LineDecoder(encoding)
    async with contextlib.aclosing(chunks.__aiter__()) as source:
        async for chunk in source:
            for line in decoder.feed(chunk):
                yield line
    for line in decoder.flush():
        yield line
