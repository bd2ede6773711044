"""LLMLayer client.

Blocking calls return a response model; streaming calls return an async
iterator of frames (dicts whose ``type`` says what they carry).

Usage:
    async with LLMLayerClient() as client:  # reads LLMLAYER_API_KEY
        result = await client.answer("What is SSE?", model="openai/gpt-4o-mini")

        async for frame in client.answer_stream("What is SSE?", model="openai/gpt-4o-mini"):
            if frame["type"] == "answer":
                print(frame["content"], end="")

One client holds one connection pool; close it with ``aclose()`` or use it as
an async context manager. Calls on one client may run concurrently.

Every call is bounded by the client's timeout, including the time taken to
consume a stream. Nothing is retried.
"""

from __future__ import annotations

import contextlib
import json
import logging
from collections.abc import AsyncIterator, Mapping
from typing import TYPE_CHECKING, Any

from .classify import classify, correlation_id_from
from .config import ClientConfig
from .deadline import Deadline
from .errors import LLMLayerError, TransportError
from .models import (
    AnswerResponse,
    MapResponse,
    PdfContentResponse,
    ScrapeResponse,
    WebSearchResponse,
    YTResponse,
)
from .params import to_wire
from .streaming import FrameStream, aiter_events, aiter_lines
from .transport import HTTPExecutor, HTTPRequest

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

ANSWER_PATH = "/api/v2/answer"
ANSWER_STREAM_PATH = "/api/v2/answer_stream"
WEB_SEARCH_PATH = "/api/v2/web_search"
SCRAPE_PATH = "/api/v2/scrape"
MAP_PATH = "/api/v2/map"
CRAWL_STREAM_PATH = "/api/v2/crawl_stream"
YOUTUBE_PATH = "/api/v2/youtube_transcript"
PDF_PATH = "/api/v2/get_pdf_content"

EVENT_STREAM = "text/event-stream"


class LLMLayerClient:
    """Client for the LLMLayer search and answer API.

    Args:
        api_key: Account key; falls back to ``LLMLAYER_API_KEY``.
        provider_key: Upstream model provider key; falls back to
            ``LLMLAYER_PROVIDER_KEY``. Sent with answer requests when set.
        base_url: Service address; falls back to ``LLMLAYER_BASE_URL``.
        timeout: Whole-call deadline in seconds (default 60).
        transport: Optional ``httpx.AsyncBaseTransport`` for all requests.
        config: A prebuilt ``ClientConfig``; overrides the other options.

    Raises:
        AuthenticationError: No account key could be found.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        provider_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        self.config = config or ClientConfig.resolve(
            api_key,
            provider_key=provider_key,
            base_url=base_url,
            timeout=timeout,
        )
        self._executor = HTTPExecutor(transport)

    def __repr__(self) -> str:
        return f"LLMLayerClient({self.config!r})"

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    async def answer(self, query: str, model: str, **params: Any) -> AnswerResponse:
        """Ask a question and wait for the complete answer.

        Extra keyword arguments (``max_tokens``, ``answerType``,
        ``json_schema``, ...) are sent as request fields; camelCase names are
        converted to snake_case and ``None`` values are dropped.
        """
        body = self._answer_body(query, model, params)
        data = await self._request(ANSWER_PATH, body)
        return AnswerResponse.model_validate(data)

    def answer_stream(self, query: str, model: str, **params: Any) -> AsyncIterator[dict[str, Any]]:
        """Ask a question and stream the answer.

        Frames arrive as ``sources``, ``images``, ``answer`` (text deltas),
        ``usage`` and finally ``done``. An error frame is raised as the
        matching ``LLMLayerError`` after all earlier frames were yielded.
        """
        body = self._answer_body(query, model, params)
        return self._stream(ANSWER_STREAM_PATH, body)

    # ------------------------------------------------------------------
    # Web
    # ------------------------------------------------------------------

    async def web_search(self, query: str, **params: Any) -> WebSearchResponse:
        """Run a raw web search (``search_type``, ``location``, ``recency``, ...)."""
        data = await self._request(WEB_SEARCH_PATH, to_wire({"query": query, **params}))
        return WebSearchResponse.model_validate(data)

    async def scrape(self, url: str, **params: Any) -> ScrapeResponse:
        """Scrape one page (``formats``, ``include_images``, ``advanced_proxy``, ...)."""
        data = await self._request(SCRAPE_PATH, to_wire({"url": url, **params}))
        return ScrapeResponse.model_validate(data)

    async def map(self, url: str, **params: Any) -> MapResponse:
        """List the links of a site. ``timeout_ms`` is sent as ``timeout``."""
        body = to_wire({"url": url, **params}, renames={"timeout_ms": "timeout"})
        data = await self._request(MAP_PATH, body)
        return MapResponse.model_validate(data)

    def crawl_stream(self, url: str, **params: Any) -> AsyncIterator[dict[str, Any]]:
        """Crawl from a seed URL, streaming ``page`` frames then ``usage`` and ``done``.

        ``timeout_seconds`` is sent as ``timeout``.
        """
        body = to_wire({"url": url, **params}, renames={"timeout_seconds": "timeout"})
        return self._stream(CRAWL_STREAM_PATH, body)

    async def youtube_transcript(self, url: str, language: str | None = None) -> YTResponse:
        data = await self._request(YOUTUBE_PATH, to_wire({"url": url, "language": language}))
        return YTResponse.model_validate(data)

    async def pdf_content(self, url: str) -> PdfContentResponse:
        data = await self._request(PDF_PATH, {"url": url})
        return PdfContentResponse.model_validate(data)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _answer_body(self, query: str, model: str, params: Mapping[str, Any]) -> dict[str, Any]:
        body = to_wire({"query": query, "model": model, **params})
        if self.config.provider_key and "provider_key" not in body:
            body["provider_key"] = self.config.provider_key
        return body

    def _build_request(self, path: str, body: dict[str, Any], *, stream: bool) -> HTTPRequest:
        headers = self.config.headers()
        if stream:
            headers["Accept"] = EVENT_STREAM
        return HTTPRequest("POST", f"{self.config.base_url}{path}", headers=headers, body=body)

    async def _request(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST ``body`` and return the decoded JSON object.

        Raises:
            LLMLayerError: The response was classified as an error, or the
                call failed or timed out.
        """
        request = self._build_request(path, body, stream=False)
        deadline = Deadline.start(self.config.timeout)

        async with deadline.guard():
            async with self._executor.execute(request) as response:
                raw = await self._executor.read_body(response)
                status = response.status_code
                correlation_id = correlation_id_from(response.headers)

        payload = _parse_json(raw)
        record = classify(payload, status, correlation_id)
        if record is not None:
            logger.warning(f"{path} failed: {record.kind.value}: {record.message}")
            raise record.to_exception()

        if not isinstance(payload, dict):
            raise LLMLayerError(
                f"Unexpected response body from {path} (HTTP {status})",
                status=status,
                correlation_id=correlation_id,
            )
        return payload

    def _stream(self, path: str, body: dict[str, Any]) -> AsyncIterator[dict[str, Any]]:
        # Resolve the backend now so a missing one fails at call time,
        # before iteration opens a connection.
        self._executor.backend()
        if self._executor.closed:
            raise TransportError("Client is closed")
        request = self._build_request(path, body, stream=True)
        return self._iter_stream(path, request)

    async def _iter_stream(self, path: str, request: HTTPRequest) -> AsyncIterator[dict[str, Any]]:
        deadline = Deadline.start(self.config.timeout)

        async with contextlib.AsyncExitStack() as stack:
            async with deadline.guard():
                response = await stack.enter_async_context(self._executor.execute(request))
            status = response.status_code
            correlation_id = correlation_id_from(response.headers)
            content_type = response.headers.get("content-type", "")

            if status >= 400 or _is_json(content_type):
                async with deadline.guard():
                    raw = await self._executor.read_body(response)
                payload = _parse_json(raw)
                record = classify(payload, status, correlation_id)
                if record is not None:
                    logger.warning(f"{path} failed: {record.kind.value}: {record.message}")
                    raise record.to_exception()
                if not isinstance(payload, dict):
                    raise LLMLayerError(
                        f"Unexpected response body from {path} (HTTP {status})",
                        status=status,
                        correlation_id=correlation_id,
                    )
                # Plain JSON reply to a streaming request
                yield payload
                return

            # Anything else is read as an event stream, labelled or not
            chunks = deadline.bound(self._executor.iter_body(response))
            frames = FrameStream(aiter_events(aiter_lines(chunks)), correlation_id=correlation_id)
            async with contextlib.aclosing(frames.__aiter__()) as iterator:
                async for frame in iterator:
                    yield frame

            if frames.frames_seen == 0 and not content_type.startswith(EVENT_STREAM):
                raise LLMLayerError(
                    f"Unexpected response body from {path} (HTTP {status}, {content_type!r})",
                    status=status,
                    correlation_id=correlation_id,
                )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying HTTP client and its transport."""
        await self._executor.aclose()

    async def __aenter__(self) -> LLMLayerClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type.endswith("json")


def _parse_json(raw: bytes) -> Any | None:
    """Decode a response body; ``None`` when it is empty or not JSON."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug(f"Response body is not JSON: {raw[:80]!r}")
        return None
