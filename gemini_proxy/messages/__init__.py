"""Anthropic Messages API translation helpers.

Provides translation between Anthropic Messages API format and the Vertex AI
Gemini API format, enabling the proxy to serve Anthropic-format requests from
a Gemini backend.
"""

from .content import extract_text, map_role, to_backend_content, to_backend_parts
from .stream_adapter import (
    STREAM_STOP_REASON,
    GeminiToMessagesStreamAdapter,
    StreamChunk,
    StreamPhase,
    adapt_gemini_stream_to_messages,
)
from .translator import (
    generate_content_to_messages,
    map_finish_reason,
    messages_to_generate_content,
)

__all__ = [
    "messages_to_generate_content",
    "generate_content_to_messages",
    "map_finish_reason",
    "map_role",
    "to_backend_parts",
    "to_backend_content",
    "extract_text",
    "GeminiToMessagesStreamAdapter",
    "StreamChunk",
    "StreamPhase",
    "STREAM_STOP_REASON",
    "adapt_gemini_stream_to_messages",
]
