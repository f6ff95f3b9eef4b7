"""Command line interface: serve the proxy and inspect its configuration."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from . import config_loader
from .config_loader import (
    AUTH_METHODS,
    ProxyConfig,
    load_proxy_config,
    save_config,
    validate_service_account_file,
)
from .core.exceptions import ConfigurationError
from .logging import setup_logging
from .models import DEFAULT_MODEL, MODELS


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .main import create_app

    config = load_proxy_config(args.config)
    logger = setup_logging(args.log_level or config.log_level)
    app = create_app(config)
    logger.info(f"Gemini Proxy running on http://{config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    from .auth import build_credential_provider

    config = load_proxy_config(args.config)
    path = config_loader.resolve_config_path(args.config or config_loader.CONFIG_PATH)
    info = MODELS.get(config.model)

    print(f"Config file:  {path}")
    print(f"Project:      {config.project_id}")
    print(f"Region:       {config.location}")
    print(f"Model:        {info.display_name if info else config.model} ({config.model})")
    print(f"Auth method:  {config.auth_method}")
    print(f"Listen:       http://{config.host}:{config.port}")

    provider = build_credential_provider(config)
    account_id = asyncio.run(provider.get_account_id())
    print(f"Account:      {account_id or 'unresolved'}")
    return 0


def _cmd_test(args: argparse.Namespace) -> int:
    from .main import build_client

    config = load_proxy_config(args.config)
    client = build_client(config)
    print(f"Testing connection to {client.backend.build_url()} ...")
    result = asyncio.run(client.test_connection())
    if result["success"]:
        print("Connection successful")
        return 0
    print(f"Connection failed: {result['error']}", file=sys.stderr)
    return 1


def _cmd_models(args: argparse.Namespace) -> int:
    for name, info in MODELS.items():
        marker = "*" if name == DEFAULT_MODEL else " "
        print(
            f"{marker} {name:<22} {info.display_name:<18} "
            f"context={info.context_window} max_output={info.max_output_tokens}"
        )
        print(f"    {info.description}")
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    if args.auth_method == "service-account":
        if not args.service_account or not validate_service_account_file(args.service_account):
            raise ConfigurationError(
                f"Invalid service account file: {args.service_account or '(not set)'}"
            )

    config = ProxyConfig.from_mapping(
        {
            "gemini": {
                "project_id": args.project,
                "location": args.location,
                "model": args.model,
                "auth_method": args.auth_method,
                "service_account_path": args.service_account,
            },
            "proxy_settings": {
                "server": {"host": args.host, "port": args.port},
            },
        }
    )
    path = save_config(config, args.config)
    print(f"Configuration saved to {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemini-proxy",
        description="Serve the Anthropic Messages API on top of Vertex AI Gemini",
    )
    parser.add_argument(
        "--config",
        help="Path to config.yaml (default: GEMINI_PROXY_CONFIG or configs/config.yaml)",
    )
    parser.add_argument("--log-level", help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Start the proxy server").set_defaults(func=_cmd_serve)
    subparsers.add_parser("status", help="Show configuration and credentials").set_defaults(
        func=_cmd_status
    )
    subparsers.add_parser("test", help="Send a test request to Gemini").set_defaults(
        func=_cmd_test
    )
    subparsers.add_parser("models", help="List known Gemini models").set_defaults(
        func=_cmd_models
    )

    config_parser = subparsers.add_parser("config", help="Write a config file")
    config_parser.add_argument("--project", required=True, help="Google Cloud project id")
    config_parser.add_argument("--location", default="us-central1", help="Vertex AI region")
    config_parser.add_argument("--model", default=DEFAULT_MODEL, help="Gemini model id")
    config_parser.add_argument(
        "--auth-method", choices=AUTH_METHODS, default="adc", help="Credential source"
    )
    config_parser.add_argument("--service-account", help="Service account key file")
    config_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    config_parser.add_argument("--port", type=int, default=8080, help="Listen port")
    config_parser.set_defaults(func=_cmd_config)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        setup_logging(args.log_level)
    try:
        return args.func(args)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc.message}", file=sys.stderr)
        print("Run: gemini-proxy config --project <id>", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
