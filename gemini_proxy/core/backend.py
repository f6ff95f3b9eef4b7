"""Backend endpoint configuration and utilities."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger("gemini-proxy")

DEFAULT_TIMEOUT = 60

GENERATE_METHOD = "generateContent"
STREAM_GENERATE_METHOD = "streamGenerateContent"

# Ask Vertex for SSE framing; the stream adapter also accepts bare JSON lines.
STREAM_QUERY = "alt=sse"


@dataclass
class VertexBackend:
    """Represents the Vertex AI Gemini endpoint for one model."""

    project_id: str
    location: str
    model: str
    timeout: Optional[float] = None
    api_base: Optional[str] = None

    @property
    def base_url(self) -> str:
        if self.api_base:
            return self.api_base.rstrip("/")
        return f"https://{self.location}-aiplatform.googleapis.com/v1"

    def build_url(self, stream: bool = False) -> str:
        """Build the generateContent (or streamGenerateContent) URL."""
        method = STREAM_GENERATE_METHOD if stream else GENERATE_METHOD
        url = (
            f"{self.base_url}/projects/{self.project_id}/locations/{self.location}"
            f"/publishers/google/models/{self.model}:{method}"
        )
        if stream and STREAM_QUERY:
            url = f"{url}?{STREAM_QUERY}"
        return url

    @classmethod
    def from_config(cls, config: Any, api_base: Optional[str] = None) -> "VertexBackend":
        return cls(
            project_id=config.project_id,
            location=config.location,
            model=config.model,
            timeout=config.request_timeout,
            api_base=api_base,
        )


def build_outbound_headers(token: str) -> dict[str, str]:
    """Build headers for outbound requests to Vertex AI."""
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        # Explicitly request uncompressed responses
        "Accept-Encoding": "identity",
    }


def format_httpx_error(exc: Any, backend: VertexBackend, url: Optional[str] = None) -> str:
    """Produce a detailed, user-facing description of an httpx error."""
    parts = [exc.__class__.__name__]
    message = str(exc).strip()
    if message:
        parts.append(message)

    request = None
    try:
        request = exc.request
    except (AttributeError, RuntimeError):
        # httpx raises RuntimeError when .request was never set
        request = None
    if request is not None:
        parts.append(f"request={request.method} {request.url}")
    elif url:
        parts.append(f"url={url}")

    if isinstance(exc, httpx.TimeoutException):
        timeout = backend.timeout or DEFAULT_TIMEOUT
        parts.append(f"timeout={timeout}s")

    return "; ".join(parts)
