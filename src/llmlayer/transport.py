"""HTTP execution for the client.

The HTTP backend (httpx) is resolved lazily on first use and memoized for
the process. Each ``HTTPExecutor`` builds one ``httpx.AsyncClient`` on first
use and sends every call through it; calls get their own response, so
concurrent calls share only the connection pool. The client, and the
transport under it, is closed by ``HTTPExecutor.aclose``.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from types import ModuleType
from typing import TYPE_CHECKING, Any

from .errors import ConfigurationError, RequestTimeout, TransportError

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)


@functools.cache
def resolve_http_backend() -> ModuleType:
    """Import and return the httpx module.

    Raises:
        ConfigurationError: httpx is not installed.
    """
    try:
        import httpx
    except ImportError as e:
        raise ConfigurationError(
            "httpx package required. Install with: pip install httpx"
        ) from e
    return httpx


@dataclass(frozen=True)
class HTTPRequest:
    """One outbound request, built per call and then discarded."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] | None = None

    def content(self) -> bytes | None:
        if self.body is None:
            return None
        return json.dumps(self.body).encode("utf-8")


class HTTPExecutor:
    """Executes requests over httpx.

    Args:
        transport: Optional ``httpx.AsyncBaseTransport`` to send requests
            through (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def backend(self) -> ModuleType:
        """Resolve the HTTP backend; fails before any network activity."""
        return resolve_http_backend()

    def _client(self) -> httpx.AsyncClient:
        """Return the shared client, building it on first use."""
        if self._closed:
            raise TransportError("Client is closed")
        if self._http_client is None:
            httpx = self.backend()
            self._http_client = httpx.AsyncClient(
                transport=self._transport,
                timeout=httpx.Timeout(None),
            )
        return self._http_client

    async def aclose(self) -> None:
        """Close the shared client and its transport. Safe to call twice."""
        self._closed = True
        if self._http_client is not None:
            client, self._http_client = self._http_client, None
            await client.aclose()

    @asynccontextmanager
    async def execute(self, request: HTTPRequest) -> AsyncIterator[httpx.Response]:
        """Send ``request`` and yield the response with an unread body.

        The response is always closed on exit, which drops the connection if
        the body was not fully consumed.

        Raises:
            RequestTimeout: httpx gave up waiting on the network.
            TransportError: The request could not be sent.
        """
        httpx = self.backend()
        client = self._client()
        logger.debug(f"{request.method} {request.url}")
        try:
            response = await client.send(
                client.build_request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=request.content(),
                ),
                stream=True,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeout(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {request.url} failed: {e}") from e

        try:
            yield response
        finally:
            await response.aclose()

    @staticmethod
    async def read_body(response: httpx.Response) -> bytes:
        """Read a whole response body, wrapping transport failures."""
        httpx = resolve_http_backend()
        try:
            return await response.aread()
        except httpx.TimeoutException as e:
            raise RequestTimeout(f"Timed out reading response body: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to read response body: {e}") from e

    @staticmethod
    async def iter_body(response: httpx.Response) -> AsyncIterator[bytes]:
        """Yield raw body chunks, wrapping transport failures."""
        httpx = resolve_http_backend()
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.TimeoutException as e:
            raise RequestTimeout(f"Timed out reading response stream: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Response stream failed: {e}") from e
