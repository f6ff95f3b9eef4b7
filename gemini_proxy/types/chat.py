"""Types for the two chat wire formats handled by the proxy.

Types are separated into:
- Anthropic Messages types: what clients send to and receive from the proxy
- Gemini (Vertex AI) types: what the proxy sends to and receives from the backend
"""

from typing import Any
from typing_extensions import TypedDict


# =============================================================================
# Anthropic Messages Types
# =============================================================================


class AnthropicImageSource(TypedDict, total=False):
    """Inline image payload of an Anthropic image block.

    Attributes:
        type: Source type, normally "base64".
        media_type: MIME type of the image, e.g. "image/png".
        data: Base64-encoded image bytes.
    """
    type: str
    media_type: str
    data: str


class AnthropicContentBlock(TypedDict, total=False):
    """A content block in an Anthropic message.

    Attributes:
        type: Block type. "text" and "image" are translated, any other
            type is dropped.
        text: Text content (for "text" blocks).
        source: Image payload (for "image" blocks).
    """
    type: str
    text: str
    source: AnthropicImageSource


class AnthropicMessage(TypedDict):
    """A message in an Anthropic Messages request."""
    role: str
    content: str | list[AnthropicContentBlock]


class AnthropicRequest(TypedDict, total=False):
    """Anthropic Messages API request body.

    Only ``messages`` is required. Generation parameters that are absent
    stay absent in the translated request.
    """
    model: str
    messages: list[AnthropicMessage]
    max_tokens: int
    temperature: float
    top_p: float
    top_k: int
    stream: bool
    system: str | list[AnthropicContentBlock]
    stop_sequences: list[str]


class AnthropicUsage(TypedDict):
    """Token usage reported on an Anthropic message."""
    input_tokens: int
    output_tokens: int


class AnthropicResponse(TypedDict):
    """A complete (non-streaming) Anthropic Messages response.

    Attributes:
        id: Message id generated by the proxy ("msg_...").
        type: Always "message".
        role: Always "assistant".
        content: A single text block.
        model: Model name reported back to the client.
        stop_reason: One of "end_turn", "max_tokens", "stop_sequence".
        stop_sequence: Always None, Gemini does not report it.
        usage: Input and output token counts.
    """
    id: str
    type: str
    role: str
    content: list[dict[str, Any]]
    model: str
    stop_reason: str
    stop_sequence: str | None
    usage: AnthropicUsage


# =============================================================================
# Gemini Types
# =============================================================================


class GeminiInlineData(TypedDict):
    """Inline binary data of a Gemini part."""
    mimeType: str
    data: str


class GeminiPart(TypedDict, total=False):
    """A part of Gemini content. Exactly one of the fields is set."""
    text: str
    inlineData: GeminiInlineData


class GeminiContent(TypedDict):
    """Gemini content: a role ("user" or "model") and ordered parts."""
    role: str
    parts: list[GeminiPart]


class GenerationConfig(TypedDict, total=False):
    """Gemini generation parameters. Only explicitly set fields appear."""
    maxOutputTokens: int
    temperature: float
    topP: float
    topK: int
    stopSequences: list[str]


class SystemInstruction(TypedDict):
    """System prompt sent separately from the message contents."""
    parts: list[GeminiPart]


class GeminiRequest(TypedDict, total=False):
    """Gemini generateContent request body."""
    contents: list[GeminiContent]
    generationConfig: GenerationConfig
    systemInstruction: SystemInstruction


class UsageMetadata(TypedDict, total=False):
    """Token accounting reported by Gemini.

    Attributes:
        promptTokenCount: Tokens in the prompt.
        candidatesTokenCount: Tokens across generated candidates.
        totalTokenCount: Sum of the two.
    """
    promptTokenCount: int
    candidatesTokenCount: int
    totalTokenCount: int


class Candidate(TypedDict, total=False):
    """One generated completion option. Only index 0 is ever consumed."""
    content: GeminiContent
    finishReason: str


class GeminiResponse(TypedDict, total=False):
    """Gemini generateContent response (or one streamed chunk of it)."""
    candidates: list[Candidate]
    usageMetadata: UsageMetadata
