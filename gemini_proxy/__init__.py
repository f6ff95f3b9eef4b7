"""gemini-proxy - Anthropic Messages API on top of Vertex AI Gemini

A lightweight proxy that accepts Anthropic Messages requests, translates them
to Gemini generateContent calls, and translates the results (including live
streams) back.

This module provides:
- Request/response translators and the streaming adapter
- GeminiClient: bearer-token authenticated Vertex AI client
- create_app: FastAPI application factory

Example:
    >>> from gemini_proxy import create_app, load_proxy_config
    >>> import uvicorn
    >>> config = load_proxy_config("configs/config.yaml")
    >>> uvicorn.run(create_app(config), host=config.host, port=config.port)
"""

from .config_loader import ProxyConfig, load_config, load_proxy_config
from .core import GeminiClient, ProxyError, VertexBackend
from .logging import logger, setup_logging
from .main import create_app

__all__ = [
    "create_app",
    "GeminiClient",
    "load_config",
    "load_proxy_config",
    "logger",
    "ProxyConfig",
    "ProxyError",
    "setup_logging",
    "VertexBackend",
]
