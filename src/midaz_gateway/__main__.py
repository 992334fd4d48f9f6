"""Command-line entry point: `python -m midaz_gateway` / `midaz-gateway`.

Flags override environment configuration. Invalid configuration exits with 2.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

from pydantic import ValidationError

from midaz_gateway.ext.mcp import TRANSPORTS, MCPServer
from midaz_gateway.foundation.config import (
    AuthSettings,
    BackendSettings,
    GatewaySettings,
    LoggingSettings,
    RetrySettings,
    get_settings,
)
from midaz_gateway.gateway import ResourceGateway
from midaz_gateway.runtime.observability import configure_logging, get_logger
from midaz_gateway.tools import MidazApiTool, ToolRegistry


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="midaz-gateway",
        description="MCP server exposing CRUD access to the Midaz ledger API",
    )
    parser.add_argument("--transport", choices=TRANSPORTS, default="stdio", help="MCP transport (default: stdio)")
    parser.add_argument("--host", default="127.0.0.1", help="Bind host for HTTP transports")
    parser.add_argument("--port", type=int, default=8080, help="Bind port for HTTP transports")

    backend = parser.add_argument_group("backend")
    backend.add_argument("--onboarding-url", help="Onboarding service base URL")
    backend.add_argument("--transaction-url", help="Transaction service base URL")
    backend.add_argument("--backend-url", help="Single base URL for both services (legacy)")
    backend.add_argument("--api-key", help="Static API key (used when no client credentials are set)")
    backend.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
    backend.add_argument("--retries", type=int, help="Retries for failed backend calls")

    logging = parser.add_argument_group("logging")
    logging.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    logging.add_argument("--log-format", choices=("console", "json", "none"), help="Log output format")
    return parser


def apply_overrides(settings: GatewaySettings, args: argparse.Namespace) -> GatewaySettings:
    """Merge command-line flags into settings, re-validating every touched section."""
    backend: dict[str, Any] = {}
    if args.backend_url:
        backend.update(onboarding_url=args.backend_url, transaction_url=args.backend_url)
    if args.onboarding_url:
        backend["onboarding_url"] = args.onboarding_url
    if args.transaction_url:
        backend["transaction_url"] = args.transaction_url
    if args.timeout is not None:
        backend["timeout"] = args.timeout

    update: dict[str, Any] = {}
    if backend:
        update["backend"] = BackendSettings.model_validate(
            {**settings.backend.model_dump(exclude={"legacy_url", "token_url"}), **backend},
        )
    if args.api_key:
        update["auth"] = AuthSettings.model_validate({**settings.auth.model_dump(), "api_key": args.api_key})
    if args.retries is not None:
        update["retry"] = RetrySettings.model_validate({**settings.retry.model_dump(), "max_retries": args.retries})
    if args.log_level or args.log_format:
        logging = {k: v for k, v in (("level", args.log_level), ("format", args.log_format)) if v}
        update["logging"] = LoggingSettings.model_validate({**settings.logging.model_dump(), **logging})
    return settings.model_copy(update=update) if update else settings


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = apply_overrides(get_settings(), args)
    except ValidationError as exc:
        sys.stderr.write(f"[ERROR] invalid configuration: {exc}\n")
        return 2

    configure_logging(settings.logging.format, settings.logging.level)
    log = get_logger("cli")

    registry = ToolRegistry()
    registry.register(MidazApiTool(ResourceGateway(settings), owns_gateway=True))

    try:
        server = MCPServer(settings.server_name, registry)
    except ImportError as exc:
        sys.stderr.write(f"[ERROR] {exc}\n")
        return 1

    log.info(
        "gateway configured",
        onboarding_url=settings.backend.onboarding_url,
        transaction_url=settings.backend.transaction_url,
        auth="client_credentials" if settings.auth.has_client_credentials
        else "api_key" if settings.auth.api_key else "none",
    )
    server.run(args.transport, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
