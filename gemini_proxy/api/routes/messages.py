"""Anthropic-compatible Messages API endpoint backed by Gemini."""

import json
import logging
import time
import uuid
from typing import Any, AsyncIterator, Mapping, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.requests import ClientDisconnect

from ...core.exceptions import (
    AuthError,
    EmptyResponseError,
    InvalidRequestError,
    UpstreamError,
)
from ...core.registry import get_client
from ...messages import (
    GeminiToMessagesStreamAdapter,
    generate_content_to_messages,
    messages_to_generate_content,
)

logger = logging.getLogger("gemini-proxy")

DEFAULT_RESPONSE_MODEL = "gemini"


def _anthropic_error_response(
    message: str,
    *,
    error_type: str = "invalid_request_error",
    status_code: int = 400,
    error_code: Optional[str] = None,
    param: Optional[str] = None,
) -> JSONResponse:
    error: dict[str, Any] = {"type": error_type, "message": message}
    if error_code:
        error["code"] = error_code
    if param:
        error["param"] = param
    payload = {"type": "error", "error": error}
    return JSONResponse(payload, status_code=status_code)


def _internal_error_response(exc: Exception) -> JSONResponse:
    return _anthropic_error_response(
        str(exc) or "Internal server error",
        error_type="api_error",
        status_code=500,
        error_code="internal_error",
    )


def _upstream_status(exc: UpstreamError) -> int:
    if exc.status_code is not None and exc.status_code >= 400:
        return exc.status_code
    return 502


async def messages_endpoint(request: Request) -> Response:
    """POST /v1/messages - Anthropic Messages API compatible endpoint."""
    # Generate request ID for log correlation
    req_id = uuid.uuid4().hex[:8]
    start_time = time.perf_counter()

    client_host = request.client.host if request.client else "unknown"
    client_port = request.client.port if request.client else "unknown"
    content_length = request.headers.get("content-length", "not-set")

    logger.info(
        f"[{req_id}] Messages API request from {client_host}:{client_port}, "
        f"Content-Length: {content_length}"
    )

    try:
        body = await request.body()
        payload = json.loads(body or b"{}")
    except ClientDisconnect:
        elapsed = time.perf_counter() - start_time
        logger.warning(f"[{req_id}] ClientDisconnect after {elapsed:.3f}s")
        return Response(status_code=499)  # Client Closed Request
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _anthropic_error_response(
            "Invalid JSON payload",
            error_code="invalid_json",
        )

    if not isinstance(payload, Mapping):
        return _anthropic_error_response(
            "Request body must be a JSON object",
            error_code="invalid_json_shape",
        )

    try:
        gemini_request = messages_to_generate_content(payload)
    except InvalidRequestError as exc:
        logger.warning(f"[{req_id}] Rejected request: {exc.message}")
        return _anthropic_error_response(
            exc.message,
            error_code=exc.code,
            param="messages",
        )
    except Exception as exc:
        logger.exception(f"[{req_id}] Failed to translate request: {exc}")
        return _internal_error_response(exc)

    model = payload.get("model")
    if not isinstance(model, str) or not model:
        model = DEFAULT_RESPONSE_MODEL
    is_stream = payload.get("stream") is True
    message_id = f"msg_{uuid.uuid4().hex}"
    client = get_client()

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            f"[{req_id}] Translated to Gemini format: "
            f"contents_count={len(gemini_request['contents'])}, "
            f"generation_config={gemini_request.get('generationConfig', {})}, "
            f"system={'systemInstruction' in gemini_request}, stream={is_stream}"
        )

    if is_stream:
        adapter = GeminiToMessagesStreamAdapter(message_id, model)
        gemini_stream = client.stream_generate_content(gemini_request)

        async def adapted_stream() -> AsyncIterator[bytes]:
            """Drive the Gemini stream through the adapter, one fragment at a time."""
            try:
                async for event in adapter.adapt_stream(gemini_stream):
                    yield event
            finally:
                await gemini_stream.aclose()
                elapsed = time.perf_counter() - start_time
                logger.info(
                    f"[{req_id}] Streaming response finished ({adapter.phase.value}) "
                    f"after {elapsed:.3f}s"
                )

        logger.info(f"[{req_id}] Starting streaming response for {model}")
        return StreamingResponse(
            adapted_stream(),
            status_code=200,
            headers={"Cache-Control": "no-cache"},
            media_type="text/event-stream",
        )

    try:
        gemini_response = await client.generate_content(gemini_request)
        anthropic_response = generate_content_to_messages(gemini_response, message_id, model)
    except AuthError as exc:
        logger.error(f"[{req_id}] Authentication error: {exc.message}")
        return _anthropic_error_response(
            exc.message,
            error_type="authentication_error",
            status_code=500,
            error_code="auth_error",
        )
    except EmptyResponseError as exc:
        logger.error(f"[{req_id}] Empty response from backend: {exc.message}")
        return _anthropic_error_response(
            exc.message,
            error_type="api_error",
            status_code=502,
            error_code="empty_response",
        )
    except UpstreamError as exc:
        elapsed = time.perf_counter() - start_time
        logger.error(f"[{req_id}] Backend error after {elapsed:.3f}s: {exc.message}")
        return _anthropic_error_response(
            exc.message,
            error_type="api_error",
            status_code=_upstream_status(exc),
            error_code="backend_error",
        )
    except Exception as exc:
        logger.exception(f"[{req_id}] Unexpected error: {exc}")
        return _internal_error_response(exc)

    elapsed = time.perf_counter() - start_time
    logger.info(
        f"[{req_id}] Completed non-streaming response for {model}, "
        f"stop_reason={anthropic_response['stop_reason']}, took {elapsed:.3f}s"
    )
    return JSONResponse(anthropic_response)
