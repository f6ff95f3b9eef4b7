"""SSE framing and line decoding for streamed backend output."""

import codecs
import json
import logging
from typing import Any, Optional

logger = logging.getLogger("gemini-proxy")

DATA_PREFIX = "data: "


def format_sse_event(event_type: str, data: dict[str, Any]) -> bytes:
    """Format a named SSE event.

    Args:
        event_type: Event type name
        data: Event data

    Returns:
        SSE formatted bytes
    """
    json_str = json.dumps(data, ensure_ascii=False)
    return f"event: {event_type}\ndata: {json_str}\n\n".encode("utf-8")


def parse_stream_line(line: str) -> Optional[Any]:
    """Parse one complete line of a Gemini stream.

    Gemini streams either SSE-framed (``data: {...}``) or as bare JSON lines,
    sometimes mixed. Returns the decoded JSON value, or None for blank lines
    and lines that are not valid JSON.
    """
    line = line.rstrip("\r")
    if not line.strip():
        return None

    json_part = line[len(DATA_PREFIX):] if line.startswith(DATA_PREFIX) else line
    try:
        return json.loads(json_part)
    except json.JSONDecodeError:
        logger.debug(f"Dropping non-JSON stream line: {line[:100]}")
        return None


class StreamLineDecoder:
    """Reassembles newline-delimited JSON values from arbitrary byte fragments.

    Fragments may split lines, and even multi-byte UTF-8 sequences, at any
    offset. Completed lines are parsed in arrival order; the unterminated
    remainder is kept until the next fragment or ``flush()``.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.buffer = ""

    def feed(self, data: bytes) -> list[Any]:
        """Consume a fragment and return the values parsed from completed lines."""
        self.buffer += self._decoder.decode(data)
        if "\n" not in self.buffer:
            return []

        *lines, self.buffer = self.buffer.split("\n")
        values = []
        for line in lines:
            value = parse_stream_line(line)
            if value is not None:
                values.append(value)
        return values

    def flush(self) -> list[Any]:
        """Parse whatever remains in the buffer as a final line."""
        remainder = self.buffer + self._decoder.decode(b"", final=True)
        self.buffer = ""
        value = parse_stream_line(remainder)
        return [value] if value is not None else []
