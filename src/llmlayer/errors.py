"""Error taxonomy for the LLMLayer client.

Every failure surfaced by the client is an ``LLMLayerError``. The concrete
subclass is chosen from the ``ErrorKind`` the failure was classified into,
independent of how the service signalled it (status code, structured tag or a
bare string in a stream frame).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of error categories."""

    INVALID_REQUEST = "invalid_request"
    AUTHENTICATION = "authentication_error"
    RATE_LIMIT = "rate_limit"
    PROVIDER = "provider_error"
    INTERNAL_SERVER = "internal_server_error"
    GENERIC = "generic"


class LLMLayerError(Exception):
    """Base error for all client failures."""

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        correlation_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.correlation_id = correlation_id

    @property
    def record(self) -> ErrorRecord:
        """The classification record this error was built from."""
        return ErrorRecord(
            kind=self.kind,
            message=self.message,
            status=self.status,
            correlation_id=self.correlation_id,
        )


class InvalidRequest(LLMLayerError):
    kind = ErrorKind.INVALID_REQUEST


class AuthenticationError(LLMLayerError):
    kind = ErrorKind.AUTHENTICATION


class RateLimitError(LLMLayerError):
    kind = ErrorKind.RATE_LIMIT


class ProviderError(LLMLayerError):
    kind = ErrorKind.PROVIDER


class InternalServerError(LLMLayerError):
    kind = ErrorKind.INTERNAL_SERVER


class ConfigurationError(LLMLayerError):
    """The client cannot run in this environment (e.g. no HTTP backend)."""


class TransportError(LLMLayerError):
    """Host unreachable, connection dropped or body unreadable."""


class RequestTimeout(LLMLayerError):
    """The call did not finish before its deadline."""


_EXCEPTION_FOR_KIND: dict[ErrorKind, type[LLMLayerError]] = {
    ErrorKind.INVALID_REQUEST: InvalidRequest,
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.RATE_LIMIT: RateLimitError,
    ErrorKind.PROVIDER: ProviderError,
    ErrorKind.INTERNAL_SERVER: InternalServerError,
    ErrorKind.GENERIC: LLMLayerError,
}


@dataclass(frozen=True)
class ErrorRecord:
    """Outcome of classifying a failed response or stream frame."""

    kind: ErrorKind
    message: str
    status: int | None = None
    correlation_id: str | None = None

    def to_exception(self) -> LLMLayerError:
        """Build the exception matching this record's kind."""
        exc_cls = _EXCEPTION_FOR_KIND[self.kind]
        return exc_cls(self.message, status=self.status, correlation_id=self.correlation_id)
