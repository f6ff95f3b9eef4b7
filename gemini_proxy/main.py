"""Main FastAPI application for the Gemini proxy."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import health, list_models, messages_endpoint
from .auth import build_credential_provider
from .config_loader import ProxyConfig
from .core import GeminiClient, VertexBackend
from .core.registry import set_client

logger = logging.getLogger("gemini-proxy")


def build_client(config: ProxyConfig) -> GeminiClient:
    """Create the Vertex AI client described by the config."""
    backend = VertexBackend.from_config(config)
    return GeminiClient(backend, build_credential_provider(config))


def create_app(config: ProxyConfig, client: Optional[GeminiClient] = None) -> FastAPI:
    """Factory function to create the FastAPI application.

    Args:
        config: Validated proxy configuration.
        client: Backend client to use; built from ``config`` when omitted.

    Returns:
        The configured FastAPI application instance.
    """
    if client is None:
        client = build_client(config)
    set_client(client, config)

    app = FastAPI(title="Gemini Proxy")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        """Handle application startup."""
        logger.info("Gemini Proxy server starting up...")
        logger.info("Configured bind address %s:%s", config.host, config.port)
        logger.info("Model: %s", config.model)
        logger.info("Region: %s", config.location)
        logger.info("Endpoint: %s", client.backend.build_url())
        logger.info(
            "Configure Anthropic clients with ANTHROPIC_BASE_URL=http://localhost:%s "
            "and any ANTHROPIC_API_KEY",
            config.port,
        )

    app.get("/health")(health)
    app.post("/v1/messages")(messages_endpoint)
    app.get("/v1/models")(list_models)

    logger.info("FastAPI application created")
    return app


__all__ = ["build_client", "create_app"]
