"""Stream adapter for converting a Gemini stream to Anthropic Messages SSE.

Gemini streamGenerateContent output arrives SSE-framed or as bare JSON lines,
split arbitrarily across network reads:

    data: {"candidates":[{"content":{"role":"model","parts":[{"text":"Hi"}]}}]}
    {"candidates":[{"content":{"parts":[{"text":" there"}]},"finishReason":"STOP"}],"usageMetadata":{...}}

Anthropic Messages events produced, always in this order:

    event: message_start
    data: {"type":"message_start","message":{...}}

    event: content_block_start
    data: {"type":"content_block_start","index":0,"content_block":{"type":"text","text":""}}

    event: content_block_delta          (zero or more)
    data: {"type":"content_block_delta","index":0,"delta":{"type":"text_delta","text":"Hi"}}

    event: content_block_stop
    data: {"type":"content_block_stop","index":0}

    event: message_delta
    data: {"type":"message_delta","delta":{"stop_reason":"end_turn"},"usage":{"output_tokens":10}}

    event: message_stop
    data: {"type":"message_stop"}

If the upstream fails after the stream began, a single ``error`` event
replaces the closing events.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Mapping, Optional

from ..core.exceptions import ProxyError
from ..core.sse import StreamLineDecoder, format_sse_event
from .content import extract_text

logger = logging.getLogger("gemini-proxy")

# The streaming path always reports end_turn; it does not re-derive the stop
# reason from the last chunk's finishReason the way the non-streaming path does.
STREAM_STOP_REASON = "end_turn"


@dataclass(frozen=True)
class StreamChunk:
    """One decoded Gemini stream chunk.

    Attributes:
        text: Text of the first candidate ("" when absent).
        has_candidate: Whether the chunk carried a usable candidate.
        finish_reason: The candidate's finishReason, None when absent.
        output_tokens: candidatesTokenCount from usageMetadata, None when the
            chunk carried no usage.
    """

    text: str = ""
    has_candidate: bool = False
    finish_reason: Optional[str] = None
    output_tokens: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "StreamChunk":
        """Decode a parsed JSON value. Shape mismatches yield an empty chunk."""
        if not isinstance(payload, Mapping):
            return cls()

        output_tokens: Optional[int] = None
        usage = payload.get("usageMetadata")
        if isinstance(usage, Mapping):
            count = usage.get("candidatesTokenCount")
            output_tokens = count if isinstance(count, int) else 0

        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return cls(output_tokens=output_tokens)
        candidate = candidates[0]
        if not isinstance(candidate, Mapping):
            return cls(output_tokens=output_tokens)

        finish_reason = candidate.get("finishReason")
        return cls(
            text=extract_text(candidate.get("content")),
            has_candidate=True,
            finish_reason=finish_reason if isinstance(finish_reason, str) else None,
            output_tokens=output_tokens,
        )


class StreamPhase(enum.Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"
    ENDED = "ended"
    FAILED = "failed"


@dataclass
class StreamState:
    """Per-call mutable state of a stream adapter."""

    phase: StreamPhase = StreamPhase.NOT_STARTED
    output_tokens: int = 0


class GeminiToMessagesStreamAdapter:
    """Converts a Gemini byte stream to Anthropic Messages SSE events.

    Each public method is a state transition that returns the encoded events
    it produced, so the adapter can be driven by any loop (or by a plain list
    of fragments in tests). ``adapt_stream`` is the async driver used by the
    messages endpoint.
    """

    def __init__(self, message_id: str, model: str) -> None:
        """Initialize the stream adapter.

        Args:
            message_id: The message ID to use (e.g., "msg_xxx")
            model: Model name for the response
        """
        self.message_id = message_id
        self.model = model
        self.state = StreamState()
        self._lines = StreamLineDecoder()

    @property
    def phase(self) -> StreamPhase:
        return self.state.phase

    def begin(self) -> list[bytes]:
        """Emit message_start and content_block_start, exactly once."""
        if self.state.phase is not StreamPhase.NOT_STARTED:
            return []
        self.state.phase = StreamPhase.STARTED
        return [self._emit_message_start(), self._emit_content_block_start()]

    def feed(self, data: bytes) -> list[bytes]:
        """Consume a raw fragment of the Gemini stream."""
        events = self.begin()
        if self.state.phase is not StreamPhase.STARTED:
            logger.debug("StreamAdapter: ignoring data after stream %s", self.state.phase.value)
            return events
        for payload in self._lines.feed(data):
            events.extend(self.feed_chunk(StreamChunk.from_payload(payload)))
        return events

    def feed_chunk(self, chunk: StreamChunk) -> list[bytes]:
        """Apply one decoded chunk; emits at most one text delta."""
        events = self.begin()
        if self.state.phase is not StreamPhase.STARTED:
            return events

        if chunk.output_tokens is not None:
            self.state.output_tokens = chunk.output_tokens

        if chunk.has_candidate and chunk.text:
            events.append(self._emit_content_block_delta(chunk.text))
        return events

    def end(self) -> list[bytes]:
        """Close the stream normally: content_block_stop, message_delta, message_stop."""
        events = self.begin()
        if self.state.phase is not StreamPhase.STARTED:
            return events

        for payload in self._lines.flush():
            events.extend(self.feed_chunk(StreamChunk.from_payload(payload)))

        self.state.phase = StreamPhase.ENDED
        events.append(self._emit_content_block_stop())
        events.append(self._emit_message_delta())
        events.append(self._emit_message_stop())
        return events

    def fail(self, message: str) -> list[bytes]:
        """Close the stream with an in-band error event instead of the normal end."""
        events = self.begin()
        if self.state.phase is not StreamPhase.STARTED:
            return events
        self.state.phase = StreamPhase.FAILED
        self._lines = StreamLineDecoder()
        events.append(self._emit_error(message))
        return events

    async def adapt_stream(
        self,
        gemini_stream: AsyncIterator[bytes],
    ) -> AsyncIterator[bytes]:
        """Transform a Gemini byte stream into Anthropic Messages SSE events.

        Args:
            gemini_stream: Raw byte fragments from the backend

        Yields:
            Anthropic Messages API SSE events as bytes
        """
        for event in self.begin():
            yield event

        try:
            async for data in gemini_stream:
                for event in self.feed(data):
                    yield event
        except Exception as exc:
            message = exc.message if isinstance(exc, ProxyError) else (str(exc) or exc.__class__.__name__)
            logger.error(f"Streaming error for {self.message_id}: {message}")
            for event in self.fail(message):
                yield event
            return

        for event in self.end():
            yield event

    def _emit_message_start(self) -> bytes:
        message = {
            "id": self.message_id,
            "type": "message",
            "role": "assistant",
            "content": [],
            "model": self.model,
            "stop_reason": None,
            "stop_sequence": None,
            "usage": {"input_tokens": 0, "output_tokens": 0},
        }
        return format_sse_event("message_start", {"type": "message_start", "message": message})

    def _emit_content_block_start(self) -> bytes:
        event_data = {
            "type": "content_block_start",
            "index": 0,
            "content_block": {"type": "text", "text": ""},
        }
        return format_sse_event("content_block_start", event_data)

    def _emit_content_block_delta(self, text: str) -> bytes:
        event_data = {
            "type": "content_block_delta",
            "index": 0,
            "delta": {"type": "text_delta", "text": text},
        }
        return format_sse_event("content_block_delta", event_data)

    def _emit_content_block_stop(self) -> bytes:
        return format_sse_event("content_block_stop", {"type": "content_block_stop", "index": 0})

    def _emit_message_delta(self) -> bytes:
        event_data = {
            "type": "message_delta",
            "delta": {"stop_reason": STREAM_STOP_REASON, "stop_sequence": None},
            "usage": {"output_tokens": self.state.output_tokens},
        }
        return format_sse_event("message_delta", event_data)

    def _emit_message_stop(self) -> bytes:
        return format_sse_event("message_stop", {"type": "message_stop"})

    def _emit_error(self, message: str) -> bytes:
        event_data = {
            "type": "error",
            "error": {"type": "api_error", "message": message},
        }
        return format_sse_event("error", event_data)


async def adapt_gemini_stream_to_messages(
    message_id: str,
    model: str,
    gemini_stream: AsyncIterator[bytes],
) -> AsyncIterator[bytes]:
    """Convenience function to adapt a Gemini stream to Anthropic Messages.

    Args:
        message_id: Message ID for the response
        model: Model name
        gemini_stream: Input Gemini byte stream

    Yields:
        Anthropic Messages API SSE events
    """
    adapter = GeminiToMessagesStreamAdapter(message_id, model)
    async for event in adapter.adapt_stream(gemini_stream):
        yield event
