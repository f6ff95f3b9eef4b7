"""Client registry for breaking circular imports.

This module holds the backend client and active config so that routes can
import them without causing circular imports with the main module.
"""

# Global instances - set by main.create_app during initialization
client = None
config = None


def set_client(client_instance, config_instance=None):
    """Set the global Gemini client (and the config it was built from)."""
    global client, config
    client = client_instance
    config = config_instance


def get_client():
    """Get the global Gemini client."""
    if client is None:
        raise RuntimeError("Gemini client not initialized. Did you call set_client?")
    return client


def get_config():
    """Get the active proxy config."""
    if config is None:
        raise RuntimeError("Proxy config not initialized. Did you call set_client?")
    return config
