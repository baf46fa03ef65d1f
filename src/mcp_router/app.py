"""Main application entry point.

Serves an :class:`~mcp_router.mcp.McpRouter` over HTTP (Robyn) or over
stdio, depending on configuration and command line flags.
"""

import json
import logging
import os

# ---------------------------------------------------------------------------
# Logging: configure BEFORE any other imports so all loggers inherit the level.
# basicConfig writes to stderr, which keeps stdout free for stdio frames.
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)

import argparse
import asyncio
import dataclasses
import platform
from datetime import datetime, timezone
from typing import Sequence

from robyn import Request, Robyn

from mcp_router import __version__
from mcp_router.config import TRANSPORTS, Config, get_config
from mcp_router.mcp import PROTOCOL_VERSION, McpMethodHandler, McpRouter
from mcp_router.registry import build_router, get_available_categories
from mcp_router.routes import (
    EventBroadcaster,
    register_event_routes,
    register_mcp_routes,
    register_tool_routes,
)
from mcp_router.stdio import run_stdio

logger = logging.getLogger(__name__)

# Keys whose values must never appear in debug logs.
_SENSITIVE_KEYS = frozenset(
    {
        "authorization",
        "api_key",
        "apikey",
        "api-key",
        "token",
        "secret",
        "password",
        "credential",
    }
)


# ---------------------------------------------------------------------------
# Debug request logging middleware
#
# At DEBUG: method, path and content length, then the JSON body with
# sensitive values masked.
# ---------------------------------------------------------------------------


async def log_request(request: Request) -> Request:
    """Log incoming requests at DEBUG level.

    Extracted as a standalone async function so it can be tested
    independently of Robyn's ``@app.before_request()`` decorator.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return request

    if hasattr(request, "url"):
        url = request.url
        path = url.path if hasattr(url, "path") else str(url).split("?")[0]
    else:
        path = "/"

    method = request.method if hasattr(request, "method") else "?"
    content_length = (
        request.headers.get("content-length")
        or request.headers.get("Content-Length")
        or "-"
    )
    logger.debug("▶ %s %s content_length=%s", method, path, content_length)

    if method in ("POST", "PUT", "PATCH"):
        raw_body = request.body if hasattr(request, "body") else None
        if raw_body:
            body_str = (
                raw_body
                if isinstance(raw_body, str)
                else raw_body.decode("utf-8", errors="replace")
            )
            if len(body_str) <= 4096:
                try:
                    body_obj = json.loads(body_str)
                    _mask_sensitive(body_obj)
                    logger.debug("  body: %s", json.dumps(body_obj, default=str))
                except (json.JSONDecodeError, TypeError):
                    logger.debug("  body (raw): %s", body_str[:2048])
            else:
                logger.debug("  body: <%d bytes, truncated>", len(body_str))

    return request


def _is_sensitive_key(key: str) -> bool:
    """Check if a key name contains any sensitive keyword (substring match).

    Catches keys like ``OPENAI_API_KEY``, ``custom_api_key`` or
    ``x-auth-token``, not just exact matches.
    """
    lower = key.lower()
    return any(sensitive in lower for sensitive in _SENSITIVE_KEYS)


def _mask_sensitive(obj: object, _depth: int = 0) -> None:
    """Recursively mask values of sensitive keys in a dict/list, in-place.

    Handles nested structures up to depth 5.
    """
    if _depth > 5:
        return
    if isinstance(obj, dict):
        for key in obj:
            if isinstance(key, str) and _is_sensitive_key(key):
                obj[key] = "***"
            else:
                _mask_sensitive(obj[key], _depth + 1)
    elif isinstance(obj, list):
        for item in obj:
            _mask_sensitive(item, _depth + 1)


# ============================================================================
# Health & Info Endpoints
# ============================================================================


def register_service_routes(app: Robyn, router: McpRouter, config: Config) -> None:
    """Register ``/health``, ``/`` and ``/info``."""

    @app.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/")
    async def root() -> dict:
        """Service name, version and status."""
        server_info = router.server_info()
        return {
            "service": server_info.name,
            "version": server_info.version,
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/info")
    async def info() -> dict:
        """Detailed service information.

        Returns:
            Server identity, protocol version, advertised capabilities,
            enabled provider categories and the current tool list.
        """
        server_info = router.server_info()
        return {
            "name": server_info.name,
            "version": server_info.version,
            "protocolVersion": PROTOCOL_VERSION,
            "runtime": "robyn",
            "build": {
                "package": __version__,
                "python": platform.python_version(),
            },
            "instructions": router.instructions(),
            "capabilities": router.capabilities().to_wire(),
            "providers": {
                "enabled": config.mcp.providers,
                "available": get_available_categories(),
            },
            "tools": [tool.to_wire() for tool in router.list_tools()],
        }


def create_app(config: Config, router: McpRouter | None = None) -> Robyn:
    """Build the Robyn application serving ``router``.

    Args:
        config: Application configuration.
        router: Router to serve; built from ``config`` when omitted.
    """
    if router is None:
        router = build_router(config)
    handler = McpMethodHandler(
        router, require_initialize=config.mcp.require_initialize
    )

    app = Robyn(__file__)

    @app.before_request()
    async def request_logging_middleware(request: Request) -> Request:
        """Robyn before-request hook, delegates to :func:`log_request`."""
        return await log_request(request)

    events = EventBroadcaster()
    register_mcp_routes(app, handler)
    register_tool_routes(app, router, events)
    register_event_routes(app, events)
    register_service_routes(app, router, config)
    return app


# ============================================================================
# Main Entry Point
# ============================================================================


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mcp-router",
        description="Serve MCP tools, resources and prompts over HTTP or stdio.",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        help="Transport to serve on (default: MCP_TRANSPORT or http).",
    )
    parser.add_argument("--host", help="HTTP bind host (default: MCP_HOST).")
    parser.add_argument("--port", type=int, help="HTTP port (default: MCP_PORT).")
    parser.add_argument("--name", help="Server name reported to clients.")
    parser.add_argument(
        "--server-version", help="Server version reported to clients."
    )
    parser.add_argument("--instructions", help="Instructions returned by initialize.")
    parser.add_argument(
        "--providers",
        action="append",
        help="Provider categories to enable; repeatable or comma-separated "
        "(default: MCP_PROVIDERS or all).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable DEBUG logging.",
    )
    # Robyn parses sys.argv itself; unknown flags are left to it.
    arguments, _unknown = parser.parse_known_args(argv)
    return arguments


def apply_overrides(config: Config, arguments: argparse.Namespace) -> Config:
    """Return a copy of ``config`` with command line flags applied."""
    server = config.server
    if arguments.host is not None:
        server = dataclasses.replace(server, host=arguments.host)
    if arguments.port is not None:
        server = dataclasses.replace(server, port=arguments.port)

    mcp_overrides = {}
    if arguments.transport is not None:
        mcp_overrides["transport"] = arguments.transport
    if arguments.name is not None:
        mcp_overrides["server_name"] = arguments.name
    if arguments.server_version is not None:
        mcp_overrides["server_version"] = arguments.server_version
    if arguments.instructions is not None:
        mcp_overrides["instructions"] = arguments.instructions
    if arguments.providers:
        mcp_overrides["providers"] = [
            category.strip()
            for value in arguments.providers
            for category in value.split(",")
            if category.strip()
        ]

    return dataclasses.replace(
        config,
        server=server,
        mcp=dataclasses.replace(config.mcp, **mcp_overrides),
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Start the server on the configured transport."""
    arguments = parse_args(argv)
    if arguments.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = apply_overrides(get_config(), arguments)

    if config.mcp.transport == "stdio":
        router = build_router(config)
        handler = McpMethodHandler(
            router, require_initialize=config.mcp.require_initialize
        )
        asyncio.run(run_stdio(handler))
        return

    app = create_app(config)
    logger.info(
        "Starting MCP router %s on %s:%s",
        config.mcp.server_name,
        config.server.host,
        config.server.port,
    )
    app.start(host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
