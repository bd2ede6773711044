"""Response models for the blocking endpoints.

Models are deliberately lenient: every optional field has a default and
unknown fields are kept, so a response is never rejected on shape alone.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Response(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class AnswerResponse(_Response):
    """Result of ``/api/v2/answer``."""

    answer: str | dict[str, Any] = ""
    # Server often sends a formatted string such as "1.23"
    response_time: float | str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    sources: list[dict[str, Any]] = Field(default_factory=list)
    images: list[dict[str, Any]] = Field(default_factory=list)
    model_cost: float | None = None
    llmlayer_cost: float | None = None


class WebSearchResponse(_Response):
    results: list[dict[str, Any]] = Field(default_factory=list)
    cost: float | None = None


class ScrapeResponse(_Response):
    markdown: str = ""
    html: str | None = None
    pdf: str | None = None  # base64
    screenshot: str | None = None  # base64
    url: str = ""
    title: str | None = None
    status_code: int | None = Field(default=None, alias="statusCode")
    cost: float | None = None
    metadata: dict[str, Any] | None = None


class MapLink(_Response):
    url: str
    title: str = ""


class MapResponse(_Response):
    links: list[MapLink] = Field(default_factory=list)
    status_code: int | None = Field(default=None, alias="statusCode")
    cost: float | None = None


class YTResponse(_Response):
    """YouTube transcript with video metadata."""

    transcript: str = ""
    url: str = ""
    title: str | None = None
    description: str | None = None
    author: str | None = None
    views: int | None = None
    likes: int | None = None
    date: str | None = None
    cost: float | None = None
    language: str | None = None


class PdfContentResponse(_Response):
    text: str = ""
    pages: int = 0
    url: str = ""
    status_code: int | None = Field(default=None, alias="statusCode")
    cost: float | None = None
