"""Error classification for responses and stream frames.

Classification runs in two steps. ``decode_error_shape`` inspects a decoded
JSON value once and returns an ``ErrorShape`` naming which structural pattern
matched. ``classify`` turns that shape, plus the HTTP status when there is
one, into an ``ErrorRecord``; it returns ``None`` for successful payloads.

Resolution order for the error kind:
1. explicit type tag (``error_type``, or ``type`` when it is more specific
   than ``"error"``), looked up in a static table
2. HTTP status code
3. for stream frames (no status), known phrases in a bare reason string
4. ``ErrorKind.GENERIC``
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import ErrorKind, ErrorRecord

# Fields that may wrap the actual error object, in lookup order.
ENVELOPE_FIELDS = ("detail", "error")

ERROR_TYPE_KINDS: dict[str, ErrorKind] = {
    "validation_error": ErrorKind.INVALID_REQUEST,
    "authentication_error": ErrorKind.AUTHENTICATION,
    "provider_error": ErrorKind.PROVIDER,
    "rate_limit": ErrorKind.RATE_LIMIT,
    "internal_error": ErrorKind.INTERNAL_SERVER,
    # Service-specific aliases for internal failures
    "internal_server_error": ErrorKind.INTERNAL_SERVER,
    "server_error": ErrorKind.INTERNAL_SERVER,
    "scraping_error": ErrorKind.INTERNAL_SERVER,
    "crawl_error": ErrorKind.INTERNAL_SERVER,
}

INVALID_REQUEST_PHRASES = (
    "missing required field",
    "invalid selection",
    "missing_",
    "invalid_",
)

CORRELATION_HEADERS = ("x-request-id", "x-correlation-id")


class ShapeTag(str, Enum):
    """Which structural pattern an error payload matched."""

    TAGGED = "tagged"  # carries an explicit error-type tag
    BARE = "bare"  # only a plain-text reason
    UNTYPED = "untyped"  # an object with neither
    EMPTY = "empty"  # absent or unparsable body


@dataclass(frozen=True)
class ErrorShape:
    """Discriminated view of an error payload."""

    tag: ShapeTag
    error_type: str | None = None
    message: str | None = None
    reason: str | None = None


def is_error_payload(payload: Any) -> bool:
    """Check whether a decoded payload carries an error marker."""
    if not isinstance(payload, dict):
        return False
    return (
        "error_type" in payload
        or "detail" in payload
        or payload.get("type") == "error"
        or bool(payload.get("error"))
    )


def decode_error_shape(payload: Any) -> ErrorShape:
    """Match a payload against the known error layouts, most specific first.

    An object under an envelope field (``detail``, then ``error``) is decoded
    in place of the outer payload, so the result always describes the
    innermost error object.
    """
    if payload is None or payload == {} or payload == "":
        return ErrorShape(ShapeTag.EMPTY)
    if isinstance(payload, str):
        return ErrorShape(ShapeTag.BARE, reason=payload)
    if not isinstance(payload, dict):
        return ErrorShape(ShapeTag.UNTYPED)

    for field_name in ENVELOPE_FIELDS:
        inner = payload.get(field_name)
        if isinstance(inner, dict):
            return decode_error_shape(inner)

    message = _text(payload.get("message"))
    reason = _text(payload.get("error")) or _text(payload.get("detail"))

    error_type = _text(payload.get("error_type"))
    if error_type is None:
        type_field = _text(payload.get("type"))
        if type_field and type_field != "error":
            error_type = type_field

    if error_type is not None:
        return ErrorShape(ShapeTag.TAGGED, error_type=error_type, message=message, reason=reason)
    if reason is not None:
        return ErrorShape(ShapeTag.BARE, message=message, reason=reason)
    return ErrorShape(ShapeTag.UNTYPED, message=message)


def kind_for_status(status: int) -> ErrorKind:
    """Map an HTTP status code to an error kind."""
    if status == 400:
        return ErrorKind.INVALID_REQUEST
    if status in (401, 403):
        return ErrorKind.AUTHENTICATION
    if status == 429:
        return ErrorKind.RATE_LIMIT
    if status >= 500:
        return ErrorKind.INTERNAL_SERVER
    return ErrorKind.GENERIC


def kind_for_reason(reason: str) -> ErrorKind:
    """Map a bare reason string from a stream frame to an error kind."""
    lowered = reason.lower()
    if any(phrase in lowered for phrase in INVALID_REQUEST_PHRASES):
        return ErrorKind.INVALID_REQUEST
    return ErrorKind.GENERIC


def classify(
    payload: Any,
    status: int | None = None,
    correlation_id: str | None = None,
) -> ErrorRecord | None:
    """Classify a decoded response body or stream frame.

    Args:
        payload: Decoded JSON value; ``None`` when the body was absent or
            could not be parsed.
        status: HTTP status for blocking responses; ``None`` for stream frames.
        correlation_id: Upstream request id, appended to the message.

    Returns:
        ``None`` when the payload is a success, otherwise an ``ErrorRecord``.
    """
    failed = (status is not None and status >= 400) or is_error_payload(payload)
    if not failed:
        return None

    shape = decode_error_shape(payload)

    kind = ERROR_TYPE_KINDS.get(shape.error_type) if shape.error_type else None
    if kind is None:
        if status is not None:
            kind = kind_for_status(status)
        elif shape.reason is not None:
            kind = kind_for_reason(shape.reason)
        else:
            kind = ErrorKind.GENERIC

    message = shape.message or shape.reason
    if not message and status is not None:
        message = f"HTTP {status}"
    if not message:
        message = json.dumps(payload) if payload else "Unknown error"
    if correlation_id:
        message = f"{message} (request id: {correlation_id})"

    return ErrorRecord(kind=kind, message=message, status=status, correlation_id=correlation_id)


def correlation_id_from(headers: Any) -> str | None:
    """Pick the upstream request id out of response headers, if any."""
    if headers is None:
        return None
    for name in CORRELATION_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return None


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None
