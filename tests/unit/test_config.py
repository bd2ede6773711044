"""Unit tests for client configuration."""

from __future__ import annotations

import dataclasses

import pytest

from llmlayer.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ClientConfig
from llmlayer.errors import AuthenticationError


class TestClientConfig:
    """Tests for ClientConfig.resolve - options then environment."""

    def test_explicit_options(self) -> None:
        config = ClientConfig.resolve(
            "key", provider_key="pk", base_url="http://localhost:8000/", timeout=5, env={}
        )
        assert config.api_key == "key"
        assert config.provider_key == "pk"
        assert config.base_url == "http://localhost:8000"
        assert config.timeout == 5.0

    def test_defaults(self) -> None:
        config = ClientConfig.resolve("key", env={})
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.provider_key is None

    def test_environment_fallback(self) -> None:
        env = {
            "LLMLAYER_API_KEY": "env-key",
            "LLMLAYER_PROVIDER_KEY": "env-pk",
            "LLMLAYER_BASE_URL": "https://staging.llmlayer.dev/",
        }
        config = ClientConfig.resolve(env=env)
        assert config.api_key == "env-key"
        assert config.provider_key == "env-pk"
        assert config.base_url == "https://staging.llmlayer.dev"

    def test_option_beats_environment(self) -> None:
        config = ClientConfig.resolve("opt-key", env={"LLMLAYER_API_KEY": "env-key"})
        assert config.api_key == "opt-key"

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLMLAYER_API_KEY", "from-os")
        assert ClientConfig.resolve().api_key == "from-os"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(AuthenticationError, match="LLMLAYER_API_KEY missing"):
            ClientConfig.resolve(env={})

    def test_empty_key_raises(self) -> None:
        with pytest.raises(AuthenticationError):
            ClientConfig.resolve("", env={"LLMLAYER_API_KEY": ""})

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValueError, match="timeout"):
            ClientConfig.resolve("key", timeout=0, env={})

    def test_immutable(self) -> None:
        config = ClientConfig.resolve("key", env={})
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.api_key = "other"  # type: ignore[misc]

    def test_headers(self) -> None:
        headers = ClientConfig.resolve("key", env={}).headers()
        assert headers["Authorization"] == "Bearer key"
        assert headers["Content-Type"] == "application/json"
        assert headers["User-Agent"].startswith("llmlayer-python/")

    def test_repr_hides_keys(self) -> None:
        text = repr(ClientConfig.resolve("secret-key", provider_key="secret-pk", env={}))
        assert "secret" not in text
