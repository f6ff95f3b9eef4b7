"""API routes for the proxy."""

from .messages import messages_endpoint
from .models import health, list_models

__all__ = [
    "health",
    "list_models",
    "messages_endpoint",
]
