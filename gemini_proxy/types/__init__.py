"""Type definitions for the proxy."""

from .chat import (
    AnthropicContentBlock,
    AnthropicImageSource,
    AnthropicMessage,
    AnthropicRequest,
    AnthropicResponse,
    AnthropicUsage,
    Candidate,
    GeminiContent,
    GeminiInlineData,
    GeminiPart,
    GeminiRequest,
    GeminiResponse,
    GenerationConfig,
    SystemInstruction,
    UsageMetadata,
)

__all__ = [
    "AnthropicContentBlock",
    "AnthropicImageSource",
    "AnthropicMessage",
    "AnthropicRequest",
    "AnthropicResponse",
    "AnthropicUsage",
    "Candidate",
    "GeminiContent",
    "GeminiInlineData",
    "GeminiPart",
    "GeminiRequest",
    "GeminiResponse",
    "GenerationConfig",
    "SystemInstruction",
    "UsageMetadata",
]
