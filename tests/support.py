"""Test doubles for streamed HTTP responses."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

SSE_HEADERS = {"content-type": "text/event-stream"}
JSON_HEADERS = {"content-type": "application/json"}


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered in fixed chunks, optionally stalling afterwards.

    Records whether the client closed it, which is how a dropped connection
    looks from the transport side.
    """

    def __init__(self, chunks: list[bytes], *, stall: bool = False) -> None:
        self.chunks = chunks
        self.stall = stall
        self.closed = False
        self.chunks_sent = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            self.chunks_sent += 1
            yield chunk
        if self.stall:
            await asyncio.sleep(3600)

    async def aclose(self) -> None:
        self.closed = True


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled and notes when it is closed."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: list[httpx.Request] = []
        self.closed = False

        def record(request: httpx.Request) -> Any:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    async def aclose(self) -> None:
        self.closed = True

    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


class PooledStream(httpx.AsyncByteStream):
    """Body served from a transport's connection pool.

    Sends one chunk per ``delay`` seconds and fails the way a real pooled
    connection does once its transport has been closed.
    """

    def __init__(
        self, transport: RecordingTransport, chunks: list[bytes], *, delay: float = 0.02
    ) -> None:
        self.transport = transport
        self.chunks = chunks
        self.delay = delay

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            if self.transport.closed:
                raise httpx.ReadError("connection pool closed")
            yield chunk
            await asyncio.sleep(self.delay)


def sse(*events: str) -> bytes:
    """Build an SSE body with one ``data:`` line per event."""
    return "".join(f"data: {event}\n\n" for event in events).encode("utf-8")


def sse_response(
    body: bytes | list[bytes],
    *,
    stall: bool = False,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Streaming response whose body is ``body`` (one chunk) or a list of chunks."""
    chunks = body if isinstance(body, list) else [body]
    return httpx.Response(
        status_code,
        headers={**SSE_HEADERS, **(headers or {})},
        stream=ChunkedStream(chunks, stall=stall),
    )


def json_response(
    payload: Any, *, status_code: int = 200, headers: dict[str, str] | None = None
) -> httpx.Response:
    return httpx.Response(
        status_code,
        headers={**JSON_HEADERS, **(headers or {})},
        content=json.dumps(payload).encode("utf-8"),
    )
