"""API module for the proxy."""

from .routes import health, list_models, messages_endpoint

__all__ = [
    "health",
    "list_models",
    "messages_endpoint",
]
