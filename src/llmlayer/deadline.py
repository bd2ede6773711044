"""Whole-call deadlines.

A ``Deadline`` is started when a call begins and is shared by every await
that call makes: sending the request, reading a blocking body, and pulling
each chunk of a streamed body. It is absolute, so time the caller spends
between pulls also counts against it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import TypeVar

from .errors import RequestTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Deadline:
    """Absolute deadline on the running event loop's clock."""

    def __init__(self, timeout: float, when: float) -> None:
        self.timeout = timeout
        self.when = when

    @classmethod
    def start(cls, timeout: float) -> Deadline:
        """Start a deadline ``timeout`` seconds from now."""
        loop = asyncio.get_running_loop()
        return cls(timeout, loop.time() + timeout)

    def remaining(self) -> float:
        """Seconds left; negative once expired."""
        return self.when - asyncio.get_running_loop().time()

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def _error(self) -> RequestTimeout:
        return RequestTimeout(f"Request timed out after {self.timeout:g}s")

    @contextlib.asynccontextmanager
    async def guard(self) -> AsyncIterator[None]:
        """Bound the enclosed block by this deadline.

        Raises:
            RequestTimeout: The deadline passed while the block was running.
        """
        try:
            async with asyncio.timeout_at(self.when):
                yield
        except TimeoutError as e:
            logger.warning(f"Deadline of {self.timeout:g}s exceeded")
            raise self._error() from e

    async def bound(self, source: AsyncIterable[T]) -> AsyncIterator[T]:
        """Re-yield ``source`` items, failing once the deadline passes.

        Each pull from ``source`` is cancelled when the deadline expires, so a
        stalled upstream cannot block the consumer. ``source`` is closed as
        soon as this iterator finishes, fails or is closed.
        """
        async with contextlib.aclosing(source.__aiter__()) as iterator:
            while True:
                if self.expired:
                    logger.warning(f"Deadline of {self.timeout:g}s exceeded")
                    raise self._error()
                async with self.guard():
                    try:
                        item = await iterator.__anext__()
                    except StopAsyncIteration:
                        return
                yield item
