"""Testing utilities for in-process proxy simulations."""

from .assertions import (
    STREAM_EVENT_ORDER,
    assert_anthropic_message_valid,
    assert_anthropic_sse_error,
    assert_anthropic_sse_valid,
    collect_text,
    parse_sse_events,
)
from .fake_upstream import (
    FakeGeminiUpstream,
    StreamError,
    UpstreamResponse,
    build_gemini_response,
    build_gemini_stream_chunks,
    encode_stream_chunk,
)
from .proxy_harness import UPSTREAM_BASE, ProxyHarness

__all__ = [
    # Core simulation classes
    "FakeGeminiUpstream",
    "UpstreamResponse",
    "StreamError",
    "ProxyHarness",
    "UPSTREAM_BASE",
    # Response builders
    "build_gemini_response",
    "build_gemini_stream_chunks",
    "encode_stream_chunk",
    # Assertions
    "STREAM_EVENT_ORDER",
    "assert_anthropic_message_valid",
    "assert_anthropic_sse_error",
    "assert_anthropic_sse_valid",
    "collect_text",
    "parse_sse_events",
]
