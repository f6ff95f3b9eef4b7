"""Core exceptions for the proxy."""

from typing import Optional


class ProxyError(Exception):
    """Base exception for proxy errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ProxyError):
    """Raised when there's an issue with the configuration."""
    pass


class InvalidRequestError(ProxyError):
    """Raised when an incoming request is invalid."""

    def __init__(self, message: str, code: str = "invalid_request") -> None:
        super().__init__(message)
        self.code = code


class AuthError(ProxyError):
    """Raised when a bearer token cannot be obtained."""
    pass


class UpstreamError(ProxyError):
    """Raised when the Gemini backend fails or returns a non-success status.

    ``status_code`` is None for transport failures (connect errors, resets).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EmptyResponseError(UpstreamError):
    """Raised when the backend returns no candidates."""

    def __init__(self, message: str = "No response candidate from Gemini") -> None:
        super().__init__(message)
