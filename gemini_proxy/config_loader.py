"""Configuration loading from YAML files with environment variable support."""

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import dotenv_values

from .core.exceptions import ConfigurationError
from .models import DEFAULT_MODEL, MODELS

logger = logging.getLogger("gemini-proxy")

# Default path to the config file (relative to project root)
DEFAULT_CONFIG_PATH = "configs/config.yaml"

# Environment variable to override the config path
CONFIG_PATH = os.getenv("GEMINI_PROXY_CONFIG", DEFAULT_CONFIG_PATH)

AUTH_METHODS = ("service-account", "gcloud", "adc")

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


@dataclass
class ProxyConfig:
    """Validated proxy configuration.

    Attributes:
        project_id: Google Cloud project hosting the Vertex AI endpoint.
        location: Vertex AI region, e.g. "us-central1".
        model: Gemini model id.
        auth_method: One of "service-account", "gcloud", "adc".
        service_account_path: Key file, required for "service-account".
        host: Bind address of the proxy server.
        port: Listen port of the proxy server.
        request_timeout: Connect/write timeout for backend calls, in seconds.
        log_level: Level name for the "gemini-proxy" logger.
    """

    project_id: str
    location: str = "us-central1"
    model: str = DEFAULT_MODEL
    auth_method: str = "adc"
    service_account_path: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = 8080
    request_timeout: float = 60.0
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProxyConfig":
        """Build and validate a config from a loaded YAML mapping.

        Expected layout::

            gemini:
              project_id: my-project
              location: us-central1
              model: gemini-2.0-flash-exp
              auth_method: adc
              service_account_path: ~/key.json
            proxy_settings:
              server: {host: 127.0.0.1, port: 8080}
              request_timeout: 60
              logging: {level: INFO}

        Environment variables GEMINI_PROXY_HOST and GEMINI_PROXY_PORT take
        priority over the server section.

        Raises:
            ConfigurationError: If a field is missing or invalid.
        """
        gemini = data.get("gemini") or {}
        proxy_settings = data.get("proxy_settings") or {}
        server_cfg = proxy_settings.get("server") or {}
        logging_cfg = proxy_settings.get("logging") or {}

        project_id = str(gemini.get("project_id") or "").strip()
        if not project_id:
            raise ConfigurationError("gemini.project_id is required")

        auth_method = str(gemini.get("auth_method") or "adc").strip().lower()
        if auth_method not in AUTH_METHODS:
            raise ConfigurationError(
                f"Unknown auth method: {auth_method} (expected one of {', '.join(AUTH_METHODS)})"
            )

        service_account_path = gemini.get("service_account_path")
        if service_account_path:
            service_account_path = str(Path(str(service_account_path)).expanduser())
        if auth_method == "service-account" and not service_account_path:
            raise ConfigurationError(
                "Service account path is required for service-account auth method"
            )

        model = str(gemini.get("model") or DEFAULT_MODEL).strip()
        if model not in MODELS:
            logger.warning(f"Model '{model}' is not in the known model list, using it as-is")

        host = os.getenv("GEMINI_PROXY_HOST") or str(server_cfg.get("host", "127.0.0.1"))
        port = _parse_port(os.getenv("GEMINI_PROXY_PORT") or server_cfg.get("port", 8080))

        timeout = proxy_settings.get("request_timeout", 60.0)
        try:
            request_timeout = float(timeout)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid request_timeout: {timeout!r}") from exc

        return cls(
            project_id=project_id,
            location=str(gemini.get("location") or "us-central1").strip(),
            model=model,
            auth_method=auth_method,
            service_account_path=service_account_path,
            host=host,
            port=port,
            request_timeout=request_timeout,
            log_level=str(logging_cfg.get("level") or "INFO").upper(),
        )

    def to_mapping(self) -> dict[str, Any]:
        """Inverse of ``from_mapping``, suitable for ``save_config``."""
        gemini: dict[str, Any] = {
            "project_id": self.project_id,
            "location": self.location,
            "model": self.model,
            "auth_method": self.auth_method,
        }
        if self.service_account_path:
            gemini["service_account_path"] = self.service_account_path
        return {
            "gemini": gemini,
            "proxy_settings": {
                "server": {"host": self.host, "port": self.port},
                "request_timeout": self.request_timeout,
                "logging": {"level": self.log_level},
            },
        }


def _parse_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid port: {value!r}") from exc
    if not 1 <= port <= 65535:
        raise ConfigurationError(f"Port out of range: {port}")
    return port


def resolve_config_path(path: str) -> Path:
    """Resolve config path relative to project root if needed."""
    expanded = Path(path).expanduser()
    if expanded.is_absolute():
        return expanded
    project_root = Path(__file__).parent.parent
    return project_root / expanded


def resolve_env_path(config_path: Path, env_path: str | None = None) -> Path:
    """Resolve the env file path for a config file."""
    if env_path:
        return resolve_config_path(env_path)
    return config_path.with_name(".env")


def load_env_values(env_path: Path) -> dict[str, str]:
    """Load environment values from a .env file without mutating os.environ."""
    if not env_path.exists():
        return {}
    raw_values = dotenv_values(env_path)
    return {key: value for key, value in raw_values.items() if value is not None}


def load_config(
    path: str | None = None,
    env_path: str | None = None,
    substitute_env: bool = True,
) -> dict:
    """Load configuration from a YAML file.

    Args:
        path: Path to the config file. Defaults to GEMINI_PROXY_CONFIG,
              or configs/config.yaml in the project root.
        env_path: Optional .env path override for env substitution.
        substitute_env: Whether to substitute environment variables in the config.

    Returns:
        Parsed configuration dictionary.

    Raises:
        ConfigurationError: If the file does not exist or is not valid YAML.
    """
    if path is None:
        path = CONFIG_PATH

    config_path = resolve_config_path(path)

    logger.info(f"Loading configuration from {config_path}")

    if not config_path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise ConfigurationError(f"Config file not found: {config_path}")

    env_values: dict[str, str] = {}
    if substitute_env:
        env_file = resolve_env_path(config_path, env_path)
        if env_file.exists():
            logger.info(f"Loading environment variables from {env_file}")
            env_values = load_env_values(env_file)

    with config_path.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    if substitute_env:
        data = _substitute_env_vars(data, env_values)

    logger.info(f"Configuration loaded successfully from {config_path}")
    return data


def load_proxy_config(path: str | None = None, env_path: str | None = None) -> ProxyConfig:
    """Load and validate the proxy configuration in one step."""
    return ProxyConfig.from_mapping(load_config(path, env_path))


def save_config(config: ProxyConfig, path: str | None = None) -> Path:
    """Write a config file, creating parent directories as needed."""
    config_path = resolve_config_path(path or CONFIG_PATH)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(config.to_mapping(), fh, sort_keys=False)
    logger.info(f"Configuration written to {config_path}")
    return config_path


def validate_service_account_file(path: str | Path) -> bool:
    """Check that a file looks like a Google service account key."""
    key_path = Path(path).expanduser()
    try:
        data = json.loads(key_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return False
    if not isinstance(data, dict):
        return False
    return (
        data.get("type") == "service_account"
        and bool(data.get("project_id"))
        and bool(data.get("private_key"))
    )


def _substitute_env_vars(
    obj: Any, env_values: Mapping[str, str] | None = None
) -> Any:
    """Recursively substitute environment variables in configuration values.

    Supports two formats:
    - ${VAR_NAME}: Braced format
    - $VAR_NAME: Simple format

    Values from the .env file win over the process environment. Unset
    variables are left as the literal placeholder.
    """
    env_values = env_values or {}

    if isinstance(obj, dict):
        return {k: _substitute_env_vars(v, env_values) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_substitute_env_vars(item, env_values) for item in obj]
    if isinstance(obj, str):
        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            value = env_values.get(var_name)
            if value is None:
                value = os.getenv(var_name)
            if value is None:
                logger.warning(
                    f"CONFIG ERROR: Environment variable '${var_name}' is not set! "
                    f"Check your .env file or export it in your shell. "
                    f"The literal placeholder will be used."
                )
                return match.group(0)
            return value

        return _ENV_PATTERN.sub(replace_var, obj)
    return obj
