"""Core module initialization."""

from .backend import VertexBackend, build_outbound_headers, format_httpx_error
from .client import GeminiClient
from .exceptions import (
    AuthError,
    ConfigurationError,
    EmptyResponseError,
    InvalidRequestError,
    ProxyError,
    UpstreamError,
)
from .registry import get_client, get_config, set_client
from .sse import StreamLineDecoder, format_sse_event, parse_stream_line

__all__ = [
    "AuthError",
    "ConfigurationError",
    "EmptyResponseError",
    "GeminiClient",
    "InvalidRequestError",
    "ProxyError",
    "StreamLineDecoder",
    "UpstreamError",
    "VertexBackend",
    "build_outbound_headers",
    "format_httpx_error",
    "format_sse_event",
    "get_client",
    "get_config",
    "parse_stream_line",
    "set_client",
]
