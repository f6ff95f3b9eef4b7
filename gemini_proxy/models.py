"""Catalogue of the Gemini models the proxy knows about."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelInfo:
    name: str
    display_name: str
    context_window: int
    max_output_tokens: int
    description: str


MODELS: dict[str, ModelInfo] = {
    "gemini-2.0-flash-exp": ModelInfo(
        name="gemini-2.0-flash-exp",
        display_name="Gemini 2.0 Flash",
        context_window=1048576,
        max_output_tokens=8192,
        description="Fast and efficient model, best for quick responses",
    ),
    "gemini-2.0-pro-exp": ModelInfo(
        name="gemini-2.0-pro-exp",
        display_name="Gemini 2.0 Pro",
        context_window=2097152,
        max_output_tokens=8192,
        description="Balanced performance and quality",
    ),
    "gemini-exp-1206": ModelInfo(
        name="gemini-exp-1206",
        display_name="Gemini Exp 1206",
        context_window=2097152,
        max_output_tokens=8192,
        description="Experimental model with cutting-edge capabilities",
    ),
}

DEFAULT_MODEL = "gemini-2.0-flash-exp"
