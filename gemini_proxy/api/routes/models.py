"""Model listing and health endpoints."""

import logging
import time

from ...core.registry import get_config

logger = logging.getLogger("gemini-proxy")


async def list_models() -> dict:
    """List the configured Gemini model.

    GET /v1/models
    """
    logger.info("Received models list request")
    config = get_config()
    return {
        "object": "list",
        "data": [
            {
                "id": config.model,
                "object": "model",
                "created": int(time.time()),
                "owned_by": "google",
            }
        ],
    }


async def health() -> dict:
    """GET /health"""
    return {"status": "ok", "model": get_config().model}
