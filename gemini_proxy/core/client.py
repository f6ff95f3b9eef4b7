"""HTTP client for the Vertex AI Gemini API."""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Mapping, Optional

import httpx

from ..auth import CredentialProvider
from ..models import MODELS, ModelInfo
from .backend import DEFAULT_TIMEOUT, VertexBackend, build_outbound_headers, format_httpx_error
from .exceptions import ProxyError, UpstreamError

logger = logging.getLogger("gemini-proxy")


class GeminiClient:
    """Calls generateContent / streamGenerateContent with a bearer token.

    One instance is shared by all requests; it keeps no per-call state.
    ``transport`` lets tests route calls to an in-process fake upstream.
    """

    def __init__(
        self,
        backend: VertexBackend,
        credentials: CredentialProvider,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.backend = backend
        self.credentials = credentials
        self.transport = transport

    @property
    def timeout(self) -> float:
        return self.backend.timeout or DEFAULT_TIMEOUT

    async def _build_headers(self) -> dict[str, str]:
        token = await self.credentials.get_token()
        return build_outbound_headers(token)

    async def generate_content(self, request: Mapping[str, Any]) -> dict[str, Any]:
        """Send a full-response request and return the parsed JSON body.

        Raises:
            AuthError: If no token could be obtained.
            UpstreamError: On transport failure, non-2xx status or invalid JSON.
        """
        url = self.backend.build_url(stream=False)
        headers = await self._build_headers()
        body = json.dumps(request, ensure_ascii=False).encode("utf-8")

        logger.debug(f"Sending generateContent request to {url} ({len(body)} bytes)")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport, follow_redirects=True
            ) as client:
                resp = await client.post(url, headers=headers, content=body)
        except httpx.HTTPError as exc:
            detail = format_httpx_error(exc, self.backend, url)
            logger.error(f"HTTP error calling {url}: {detail}")
            raise UpstreamError(f"Gemini API request failed: {detail}") from exc

        logger.debug(f"Received response from {url}: status {resp.status_code}")
        if resp.is_error:
            raise UpstreamError(
                f"Gemini API error ({resp.status_code}): {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"Gemini API returned invalid JSON: {resp.text[:200]}",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamError(
                "Gemini API returned a non-object JSON body",
                status_code=resp.status_code,
                body=resp.text,
            )
        return payload

    async def stream_generate_content(self, request: Mapping[str, Any]) -> AsyncIterator[bytes]:
        """Open a streaming request and yield raw byte fragments as they arrive.

        Nothing is sent until the first fragment is requested. The upstream
        connection is closed when iteration ends, fails or is abandoned.

        Raises:
            AuthError: If no token could be obtained.
            UpstreamError: On transport failure or non-2xx status.
        """
        url = self.backend.build_url(stream=True)
        headers = await self._build_headers()
        body = json.dumps(request, ensure_ascii=False).encode("utf-8")
        stream_timeout = httpx.Timeout(
            connect=self.timeout, read=None, write=self.timeout, pool=self.timeout
        )

        logger.debug(f"Sending streamGenerateContent request to {url} ({len(body)} bytes)")
        try:
            async with httpx.AsyncClient(
                timeout=stream_timeout, transport=self.transport, follow_redirects=True
            ) as client:
                async with client.stream("POST", url, headers=headers, content=body) as resp:
                    if resp.is_error:
                        error_body = (await resp.aread()).decode("utf-8", errors="replace")
                        logger.warning(
                            f"Streaming request to {url} returned error status {resp.status_code}"
                        )
                        raise UpstreamError(
                            f"Gemini API error ({resp.status_code}): {error_body}",
                            status_code=resp.status_code,
                            body=error_body,
                        )

                    logger.info(f"Streaming request to {url} successful, status {resp.status_code}")
                    async for chunk in resp.aiter_bytes():
                        if chunk:
                            yield chunk
        except httpx.HTTPError as exc:
            detail = format_httpx_error(exc, self.backend, url)
            logger.error(f"HTTP error during streaming to {url}: {detail}")
            raise UpstreamError(f"Gemini API stream failed: {detail}") from exc

    async def test_connection(self) -> dict[str, Any]:
        """Send a tiny request to check credentials and endpoint.

        Returns:
            {"success": True} or {"success": False, "error": "..."}
        """
        test_request = {
            "contents": [{"role": "user", "parts": [{"text": "Hello"}]}],
            "generationConfig": {"maxOutputTokens": 10},
        }
        try:
            await self.generate_content(test_request)
        except ProxyError as exc:
            return {"success": False, "error": exc.message}
        return {"success": True}

    def get_model_info(self) -> Optional[ModelInfo]:
        return MODELS.get(self.backend.model)
