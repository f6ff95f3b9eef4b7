"""Anthropic Messages <-> Gemini generateContent translation.

This module translates between the Anthropic Messages API format and the
Vertex AI Gemini API format, enabling Anthropic clients to talk to Gemini.

Key mappings:
- Anthropic messages -> Gemini contents (role "assistant" -> "model")
- Anthropic top-level system -> Gemini systemInstruction
- Anthropic sampling parameters -> Gemini generationConfig
- Gemini finishReason -> Anthropic stop_reason

Reference:
- Anthropic Messages API: https://docs.anthropic.com/en/api/messages
- Gemini API: https://cloud.google.com/vertex-ai/generative-ai/docs/model-reference/inference
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..core.exceptions import EmptyResponseError, InvalidRequestError
from ..types import AnthropicResponse, GeminiRequest, GenerationConfig
from .content import extract_text, to_backend_content

logger = logging.getLogger("gemini-proxy")

# Anthropic parameter -> Gemini generationConfig field
_GENERATION_PARAMS = (
    ("max_tokens", "maxOutputTokens"),
    ("temperature", "temperature"),
    ("top_p", "topP"),
    ("top_k", "topK"),
)

_FINISH_REASONS = {
    "STOP": "end_turn",
    "MAX_TOKENS": "max_tokens",
    "SAFETY": "stop_sequence",
    "RECITATION": "stop_sequence",
}


def _convert_system(system: Any) -> str | None:
    """Flatten an Anthropic system prompt (string or text blocks) to a string."""
    if isinstance(system, str):
        return system or None
    if not isinstance(system, list):
        return None

    text_parts: list[str] = []
    for block in system:
        if isinstance(block, Mapping) and block.get("type") == "text":
            text = block.get("text")
            if isinstance(text, str):
                text_parts.append(text)
        else:
            logger.warning(f"Non-text block in system parameter: {block!r:.80}")
    joined = "\n".join(text_parts)
    return joined or None


def _build_generation_config(payload: Mapping[str, Any]) -> GenerationConfig:
    config: GenerationConfig = {}
    for source_key, target_key in _GENERATION_PARAMS:
        value = payload.get(source_key)
        if value is not None:
            config[target_key] = value  # type: ignore[literal-required]

    stop_sequences = payload.get("stop_sequences")
    if stop_sequences:
        config["stopSequences"] = stop_sequences
    return config


def messages_to_generate_content(payload: Mapping[str, Any]) -> GeminiRequest:
    """Translate an Anthropic Messages request to a Gemini request.

    Messages are mapped one-to-one and in order; consecutive messages with
    the same role are not merged. Only parameters present in the payload
    are copied, no defaults are filled in.

    Args:
        payload: Anthropic Messages API request body

    Returns:
        Gemini generateContent request body

    Raises:
        InvalidRequestError: If ``messages`` is missing or not a list.
    """
    messages = payload.get("messages")
    if not isinstance(messages, list):
        raise InvalidRequestError(
            "messages field is required and must be an array",
            code="invalid_messages",
        )

    request: GeminiRequest = {
        "contents": [to_backend_content(msg) for msg in messages if isinstance(msg, Mapping)],
    }

    generation_config = _build_generation_config(payload)
    if generation_config:
        request["generationConfig"] = generation_config

    system = _convert_system(payload.get("system"))
    if system:
        request["systemInstruction"] = {"parts": [{"text": system}]}

    return request


def map_finish_reason(finish_reason: str | None) -> str:
    """Convert a Gemini finishReason to an Anthropic stop_reason.

    Gemini: STOP, MAX_TOKENS, SAFETY, RECITATION, OTHER, ...
    Anthropic: end_turn, max_tokens, stop_sequence

    Unknown or missing reasons map to "end_turn".
    """
    if finish_reason is None:
        return "end_turn"
    return _FINISH_REASONS.get(finish_reason, "end_turn")


def _token_count(usage: Mapping[str, Any], key: str) -> int:
    value = usage.get(key)
    return value if isinstance(value, int) else 0


def generate_content_to_messages(
    payload: Mapping[str, Any],
    message_id: str,
    model: str,
) -> AnthropicResponse:
    """Translate a Gemini generateContent response to an Anthropic message.

    Only the first candidate is considered.

    Args:
        payload: Gemini generateContent response body
        message_id: Message id to report (generated by the caller)
        model: Model name to report

    Returns:
        Anthropic Messages API response body

    Raises:
        EmptyResponseError: If the response has no candidates.
    """
    candidates = payload.get("candidates") if isinstance(payload, Mapping) else None
    if not isinstance(candidates, list) or not candidates:
        raise EmptyResponseError()

    candidate = candidates[0]
    if not isinstance(candidate, Mapping):
        candidate = {}

    usage = payload.get("usageMetadata")
    if not isinstance(usage, Mapping):
        usage = {}

    return {
        "id": message_id,
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": extract_text(candidate.get("content"))}],
        "model": model,
        "stop_reason": map_finish_reason(candidate.get("finishReason")),
        "stop_sequence": None,
        "usage": {
            "input_tokens": _token_count(usage, "promptTokenCount"),
            "output_tokens": _token_count(usage, "candidatesTokenCount"),
        },
    }
