"""Request parameter handling.

Callers may pass parameters in camelCase (``maxTokens``) or in the canonical
snake_case wire form (``max_tokens``); both end up as snake_case keys in the
request body. Parameters left unset (``None``) are never sent.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

_INTERNAL_CAPITAL = re.compile(r"(?<!^)([A-Z])")


def to_snake_case(name: str) -> str:
    """Insert ``_`` before each internal capital and lowercase it.

    Names already in snake_case pass through unchanged.
    """
    return _INTERNAL_CAPITAL.sub(lambda m: "_" + m.group(1).lower(), name).lower()


def to_wire(
    params: Mapping[str, Any],
    renames: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build a request body from caller parameters.

    Args:
        params: Caller-supplied parameters in either naming convention.
        renames: Endpoint-specific renames applied after transliteration
            (e.g. ``{"timeout_ms": "timeout"}``).

    Returns:
        A new dict with canonical keys and no ``None`` values. A mapping passed
        as ``json_schema`` is serialized to a JSON string.
    """
    renames = renames or {}
    body: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        wire_key = to_snake_case(key)
        wire_key = renames.get(wire_key, wire_key)
        if wire_key == "json_schema" and isinstance(value, Mapping):
            value = json.dumps(value)
        body[wire_key] = value
    return body
