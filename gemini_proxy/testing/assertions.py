"""Assertion utilities for simulation tests.

These utilities provide validation and parsing functions for Anthropic
Messages responses, making tests more readable and catching structural
issues early.
"""

from __future__ import annotations

import json
from typing import Any

STREAM_EVENT_ORDER = [
    "message_start",
    "content_block_start",
    "content_block_delta",
    "content_block_stop",
    "message_delta",
    "message_stop",
]


def parse_sse_events(raw: bytes | str) -> list[dict[str, Any]]:
    """Parse an Anthropic SSE body into event dicts.

    Each returned dict is the event's JSON data with an extra ``event`` key
    holding the SSE event name.

    Args:
        raw: Full SSE response body

    Returns:
        Parsed events in order
    """
    text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    events: list[dict[str, Any]] = []
    for block in text.split("\n\n"):
        if not block.strip():
            continue
        event_name = None
        data_lines = []
        for line in block.split("\n"):
            if line.startswith("event: "):
                event_name = line[len("event: "):]
            elif line.startswith("data: "):
                data_lines.append(line[len("data: "):])
        if not data_lines:
            continue
        event = json.loads("\n".join(data_lines))
        event["event"] = event_name
        events.append(event)
    return events


def collect_text(events: list[dict[str, Any]]) -> str:
    """Concatenate all text deltas of a parsed event list."""
    return "".join(
        event["delta"]["text"]
        for event in events
        if event.get("type") == "content_block_delta"
    )


def assert_anthropic_message_valid(response: dict[str, Any]) -> None:
    """Validate that a response has valid Anthropic message structure.

    Args:
        response: Response dict to validate

    Raises:
        AssertionError: If structure is invalid
    """
    assert "type" in response, "Missing 'type' field"
    assert response["type"] == "message", f"Expected type='message', got '{response['type']}'"

    assert "id" in response, "Missing 'id' field"
    assert response["id"].startswith("msg_"), f"ID should start with 'msg_': {response['id']}"

    assert "role" in response, "Missing 'role' field"
    assert response["role"] == "assistant", f"Expected role='assistant', got '{response['role']}'"

    assert "content" in response, "Missing 'content' field"
    assert isinstance(response["content"], list), "Content should be a list"
    assert len(response["content"]) == 1, "Expected exactly one content block"

    block = response["content"][0]
    assert block.get("type") == "text", f"Expected a text block, got {block.get('type')}"
    assert isinstance(block.get("text"), str), "Text block 'text' should be a string"

    assert "stop_reason" in response, "Missing 'stop_reason' field"
    assert "stop_sequence" in response, "Missing 'stop_sequence' field"
    assert "usage" in response, "Missing 'usage' field"

    usage = response["usage"]
    assert "input_tokens" in usage, "Usage missing 'input_tokens'"
    assert "output_tokens" in usage, "Usage missing 'output_tokens'"


def assert_anthropic_sse_valid(events: list[dict[str, Any]]) -> None:
    """Validate a successful Anthropic SSE event sequence.

    Args:
        events: List of parsed SSE event dicts

    Raises:
        AssertionError: If structure is invalid
    """
    assert len(events) >= 5, f"Too few events: {[e.get('type') for e in events]}"

    for event in events:
        assert event.get("event") in (None, event.get("type")), (
            f"SSE event name {event.get('event')} does not match type {event.get('type')}"
        )

    types = [e["type"] for e in events]
    assert types[0] == "message_start", "First event should be message_start"
    assert types[1] == "content_block_start", "Second event should be content_block_start"
    assert types[-3:] == ["content_block_stop", "message_delta", "message_stop"], (
        f"Stream should close with stop/delta/stop, got {types[-3:]}"
    )
    assert all(t == "content_block_delta" for t in types[2:-3]), (
        f"Only text deltas may appear between start and stop: {types}"
    )
    assert "error" not in types, "Successful stream must not carry an error event"


def assert_anthropic_sse_error(events: list[dict[str, Any]]) -> dict[str, Any]:
    """Validate a stream that failed after it began.

    Returns:
        The error event
    """
    types = [e["type"] for e in events]
    assert types[:2] == ["message_start", "content_block_start"], f"Bad stream opening: {types}"
    assert types[-1] == "error", f"Failed stream should end with error, got {types}"
    assert types.count("error") == 1, "Expected exactly one error event"
    for closing in ("content_block_stop", "message_delta", "message_stop"):
        assert closing not in types, f"Failed stream must not contain {closing}"
    return events[-1]
