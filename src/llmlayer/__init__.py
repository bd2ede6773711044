"""LLMLayer - Python client for the LLMLayer search and answer API.

Provides blocking calls and streamed calls over Server-Sent Events.
"""

from .classify import ErrorShape, ShapeTag, classify, decode_error_shape
from .client import LLMLayerClient
from .config import ClientConfig, __version__
from .errors import (
    AuthenticationError,
    ConfigurationError,
    ErrorKind,
    ErrorRecord,
    InternalServerError,
    InvalidRequest,
    LLMLayerError,
    ProviderError,
    RateLimitError,
    RequestTimeout,
    TransportError,
)
from .models import (
    AnswerResponse,
    MapLink,
    MapResponse,
    PdfContentResponse,
    ScrapeResponse,
    WebSearchResponse,
    YTResponse,
)
from .params import to_snake_case, to_wire

__all__ = [
    "__version__",
    # Client
    "LLMLayerClient",
    "ClientConfig",
    # Errors
    "ErrorKind",
    "ErrorRecord",
    "LLMLayerError",
    "InvalidRequest",
    "AuthenticationError",
    "RateLimitError",
    "ProviderError",
    "InternalServerError",
    "ConfigurationError",
    "TransportError",
    "RequestTimeout",
    # Classification
    "ErrorShape",
    "ShapeTag",
    "classify",
    "decode_error_shape",
    # Models
    "AnswerResponse",
    "WebSearchResponse",
    "ScrapeResponse",
    "MapLink",
    "MapResponse",
    "YTResponse",
    "PdfContentResponse",
    # Parameters
    "to_snake_case",
    "to_wire",
]
