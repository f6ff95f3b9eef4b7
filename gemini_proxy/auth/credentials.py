"""Bearer-token providers for Vertex AI calls.

The backend client only needs an async source of short-lived bearer tokens;
``GoogleCredentialProvider`` implements it on top of google-auth (service
account key file or Application Default Credentials), and
``StaticTokenProvider`` serves fixed values for tests and local fakes.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

import google.auth
import google.auth.exceptions
import google.auth.transport.requests
from google.oauth2 import service_account

from ..core.exceptions import AuthError, ConfigurationError

logger = logging.getLogger("gemini-proxy")

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


class CredentialProvider(Protocol):
    """Async token source consumed by the backend client."""

    async def get_token(self) -> str:
        ...

    async def get_account_id(self) -> str:
        ...


class StaticTokenProvider:
    """Returns a fixed token; useful for tests and fake upstreams."""

    def __init__(self, token: str = "test-token", account_id: str = "test-project") -> None:
        self.token = token
        self.account_id = account_id

    async def get_token(self) -> str:
        return self.token

    async def get_account_id(self) -> str:
        return self.account_id


class GoogleCredentialProvider:
    """Obtains OAuth2 access tokens through google-auth.

    Auth methods:
        service-account: load the key file at ``service_account_path``
        gcloud / adc: Application Default Credentials (GOOGLE_APPLICATION_CREDENTIALS
            or the gcloud user config)

    Credentials are loaded lazily and refreshed only when expired. The
    blocking refresh runs in a worker thread.
    """

    def __init__(
        self,
        auth_method: str = "adc",
        service_account_path: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> None:
        if auth_method == "service-account":
            if not service_account_path:
                raise ConfigurationError(
                    "Service account path is required for service-account auth method"
                )
            if not Path(service_account_path).expanduser().exists():
                raise ConfigurationError(f"Service account file not found: {service_account_path}")
        elif auth_method not in ("gcloud", "adc"):
            raise ConfigurationError(f"Unknown auth method: {auth_method}")

        self.auth_method = auth_method
        self.service_account_path = service_account_path
        self.project_id = project_id
        self._credentials: Any = None
        self._resolved_project: Optional[str] = None
        self._lock = asyncio.Lock()

    def _load_credentials(self) -> Any:
        if self._credentials is not None:
            return self._credentials

        if self.auth_method == "service-account":
            key_path = str(Path(self.service_account_path or "").expanduser())
            credentials = service_account.Credentials.from_service_account_file(
                key_path, scopes=SCOPES
            )
            project = credentials.project_id
        else:
            credentials, project = google.auth.default(scopes=SCOPES)

        logger.debug(f"Loaded {self.auth_method} credentials (project={project})")
        self._credentials = credentials
        self._resolved_project = project
        return credentials

    def _fetch_token(self) -> str:
        credentials = self._load_credentials()
        if not credentials.valid:
            credentials.refresh(google.auth.transport.requests.Request())
        token = credentials.token
        if not token:
            raise AuthError("Failed to get access token")
        return token

    async def get_token(self) -> str:
        """Return a valid access token.

        Raises:
            AuthError: If credentials cannot be loaded or refreshed.
        """
        async with self._lock:
            try:
                return await asyncio.to_thread(self._fetch_token)
            except AuthError:
                raise
            except (google.auth.exceptions.GoogleAuthError, OSError, ValueError) as exc:
                logger.error(f"Authentication failed: {exc}")
                raise AuthError(f"Authentication failed: {exc}") from exc

    async def get_account_id(self) -> str:
        """Return the project resolved by google-auth, or the configured one."""
        async with self._lock:
            try:
                await asyncio.to_thread(self._load_credentials)
            except (google.auth.exceptions.GoogleAuthError, OSError, ValueError) as exc:
                logger.warning(f"Could not resolve project from credentials: {exc}")
        return self._resolved_project or self.project_id or ""


def build_credential_provider(config: Any) -> GoogleCredentialProvider:
    """Create the google-auth provider described by a ProxyConfig."""
    return GoogleCredentialProvider(
        auth_method=config.auth_method,
        service_account_path=config.service_account_path,
        project_id=config.project_id,
    )
