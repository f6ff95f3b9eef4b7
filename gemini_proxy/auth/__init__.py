"""Credential providers for the Vertex AI backend."""

from .credentials import (
    SCOPES,
    CredentialProvider,
    GoogleCredentialProvider,
    StaticTokenProvider,
    build_credential_provider,
)

__all__ = [
    "SCOPES",
    "CredentialProvider",
    "GoogleCredentialProvider",
    "StaticTokenProvider",
    "build_credential_provider",
]
