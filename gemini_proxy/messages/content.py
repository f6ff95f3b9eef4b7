"""Content mapping between Anthropic content blocks and Gemini parts.

Request side: Anthropic ``content`` (a string or a list of blocks) becomes an
ordered list of Gemini parts. Response side: Gemini content is reduced to its
text; inline data in responses is never surfaced to the client.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..types import GeminiContent, GeminiPart

logger = logging.getLogger("gemini-proxy")

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"


def map_role(role: Any) -> str:
    """Map an Anthropic role to a Gemini role.

    Gemini only knows "user" and "model"; anything that is not "user"
    is treated as the model's turn.
    """
    return "user" if role == "user" else "model"


def _convert_image_block(block: Mapping[str, Any]) -> GeminiPart | None:
    """Convert an Anthropic image block to a Gemini inlineData part.

    Anthropic format:
        {"type": "image", "source": {"type": "base64", "media_type": "image/png", "data": "..."}}

    Gemini format:
        {"inlineData": {"mimeType": "image/png", "data": "..."}}

    The base64 payload is passed through untouched.
    """
    source = block.get("source")
    if not isinstance(source, Mapping):
        logger.debug("Dropping image block without source")
        return None
    mime_type = source.get("media_type") or DEFAULT_IMAGE_MIME_TYPE
    return {"inlineData": {"mimeType": mime_type, "data": source.get("data")}}


def to_backend_parts(content: Any) -> list[GeminiPart]:
    """Convert Anthropic message content into Gemini parts.

    A plain string yields exactly one text part. A list of blocks yields one
    part per text or image block, in order; other block types are dropped.
    """
    if isinstance(content, str):
        return [{"text": content}]

    parts: list[GeminiPart] = []
    if not isinstance(content, list):
        return parts

    for block in content:
        if not isinstance(block, Mapping):
            continue
        block_type = block.get("type")

        if block_type == "text":
            text = block.get("text")
            if isinstance(text, str) and text:
                parts.append({"text": text})

        elif block_type == "image":
            part = _convert_image_block(block)
            if part is not None:
                parts.append(part)

        else:
            logger.debug(f"Dropping unsupported content block type: {block_type}")

    return parts


def to_backend_content(message: Mapping[str, Any]) -> GeminiContent:
    """Convert one Anthropic message into Gemini content."""
    return {
        "role": map_role(message.get("role")),
        "parts": to_backend_parts(message.get("content")),
    }


def extract_text(content: Any) -> str:
    """Concatenate the text of every part of Gemini content, in order."""
    if not isinstance(content, Mapping):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""
    return "".join(
        part["text"]
        for part in parts
        if isinstance(part, Mapping) and isinstance(part.get("text"), str)
    )
