"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from support import RecordingTransport

from llmlayer import LLMLayerClient


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials out of tests."""
    monkeypatch.delenv("LLMLAYER_API_KEY", raising=False)
    monkeypatch.delenv("LLMLAYER_PROVIDER_KEY", raising=False)
    monkeypatch.delenv("LLMLAYER_BASE_URL", raising=False)


@pytest.fixture
def make_client() -> Callable[..., tuple[LLMLayerClient, RecordingTransport]]:
    """Build a client whose requests are answered by ``handler``."""

    def factory(
        handler: Callable[[httpx.Request], Any],
        **options: Any,
    ) -> tuple[LLMLayerClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        options.setdefault("api_key", "test-key")
        options.setdefault("base_url", "https://api.test")
        return LLMLayerClient(transport=transport, **options), transport

    return factory
