"""Client configuration.

All ambient inputs (credentials, base address, timeout, version token) are
resolved once, when the client is constructed, into an immutable
``ClientConfig`` that every call reads from.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import AuthenticationError

logger = logging.getLogger(__name__)

__version__ = "0.2.0"

API_KEY_ENV = "LLMLAYER_API_KEY"
PROVIDER_KEY_ENV = "LLMLAYER_PROVIDER_KEY"
BASE_URL_ENV = "LLMLAYER_BASE_URL"

DEFAULT_BASE_URL = "https://api.llmlayer.dev"
DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class ClientConfig:
    """Immutable per-client configuration."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    provider_key: str | None = None
    user_agent: str = f"llmlayer-python/{__version__}"

    @classmethod
    def resolve(
        cls,
        api_key: str | None = None,
        *,
        provider_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ClientConfig:
        """Build a config from explicit options, falling back to the environment.

        Args:
            api_key: Account key. Falls back to ``LLMLAYER_API_KEY``.
            provider_key: Upstream provider key. Falls back to
                ``LLMLAYER_PROVIDER_KEY``; may be absent.
            base_url: Service address. Falls back to ``LLMLAYER_BASE_URL``,
                then the public endpoint. A trailing ``/`` is stripped.
            timeout: Whole-call deadline in seconds.
            env: Environment mapping (defaults to ``os.environ``).

        Raises:
            AuthenticationError: No account key is available.
        """
        env = os.environ if env is None else env

        key = api_key or env.get(API_KEY_ENV)
        if not key:
            raise AuthenticationError(f"{API_KEY_ENV} missing (set env var or pass api_key)")

        url = (base_url or env.get(BASE_URL_ENV) or DEFAULT_BASE_URL).rstrip("/")
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        config = cls(
            api_key=key,
            base_url=url,
            timeout=DEFAULT_TIMEOUT if timeout is None else float(timeout),
            provider_key=provider_key or env.get(PROVIDER_KEY_ENV) or None,
        )
        logger.debug(f"Resolved client config: base_url={config.base_url} timeout={config.timeout}")
        return config

    def headers(self) -> dict[str, str]:
        """Default request headers for every call."""
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": self.user_agent,
        }

    def __repr__(self) -> str:
        return (
            f"ClientConfig(base_url={self.base_url!r}, timeout={self.timeout!r}, "
            f"provider_key={'set' if self.provider_key else None})"
        )
