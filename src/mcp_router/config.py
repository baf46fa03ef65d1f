"""Configuration module for the MCP router.

Handles environment variables and settings for the HTTP server, the MCP
session and the bundled providers.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from mcp_router import __version__

# Load .env file from the working directory
load_dotenv()

TRANSPORTS = ("http", "stdio")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class ServerConfig:
    """HTTP server configuration from environment variables."""

    host: str = "127.0.0.1"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        return cls(
            host=os.getenv("MCP_HOST", "127.0.0.1"),
            port=int(os.getenv("MCP_PORT", "3000")),
        )


@dataclass
class McpConfig:
    """MCP session configuration.

    Attributes:
        server_name: Name reported in ``serverInfo``.
        server_version: Version reported in ``serverInfo``.
        instructions: Optional free-form text returned by ``initialize``.
        transport: ``"http"`` or ``"stdio"``.
        require_initialize: Refuse capability methods until ``initialize``.
        providers: Provider categories to register (``"all"`` for every
            registered category).
    """

    server_name: str = "mcp-router"
    server_version: str = __version__
    instructions: str | None = None
    transport: str = "http"
    require_initialize: bool = True
    providers: list[str] = field(default_factory=lambda: ["all"])

    @classmethod
    def from_env(cls) -> "McpConfig":
        """Load MCP configuration from environment variables.

        Environment variables:
            MCP_SERVER_NAME: Server name (default: ``mcp-router``)
            MCP_SERVER_VERSION: Server version (default: package version)
            MCP_INSTRUCTIONS: Instructions text (default: none)
            MCP_TRANSPORT: ``http`` or ``stdio`` (default: ``http``)
            MCP_REQUIRE_INITIALIZE: Enforce the handshake (default: true)
            MCP_PROVIDERS: Comma-separated categories (default: ``all``)

        Raises:
            ValueError: If ``MCP_TRANSPORT`` is not a known transport.
        """
        transport = os.getenv("MCP_TRANSPORT", "http").lower()
        if transport not in TRANSPORTS:
            raise ValueError(
                f"MCP_TRANSPORT must be one of {', '.join(TRANSPORTS)}, got {transport!r}"
            )
        return cls(
            server_name=os.getenv("MCP_SERVER_NAME", "mcp-router"),
            server_version=os.getenv("MCP_SERVER_VERSION", __version__),
            instructions=os.getenv("MCP_INSTRUCTIONS") or None,
            transport=transport,
            require_initialize=_env_flag("MCP_REQUIRE_INITIALIZE", "true"),
            providers=_env_list("MCP_PROVIDERS", "all"),
        )


@dataclass
class WebFetchConfig:
    """Configuration for the ``web_fetch`` tool provider."""

    timeout: float = 30.0
    max_chars: int = 10000
    max_response_bytes: int = 10 * 1024 * 1024
    allow_private_hosts: bool = False
    user_agent: str = f"Mozilla/5.0 (compatible; McpRouter/{__version__})"

    @classmethod
    def from_env(cls) -> "WebFetchConfig":
        """Load web fetch configuration from environment variables.

        Environment variables:
            WEB_FETCH_TIMEOUT_SECONDS: HTTP timeout (default: 30.0)
            WEB_FETCH_MAX_CHARS: Body characters kept before truncating
                (default: 10000)
            WEB_FETCH_MAX_RESPONSE_BYTES: Largest body read before the
                fetch is refused (default: 10 MiB)
            WEB_FETCH_ALLOW_PRIVATE_HOSTS: Allow loopback, private and
                metadata addresses (default: false)
            WEB_FETCH_USER_AGENT: User-Agent header sent with requests
        """
        return cls(
            timeout=float(os.getenv("WEB_FETCH_TIMEOUT_SECONDS", "30.0")),
            max_chars=int(os.getenv("WEB_FETCH_MAX_CHARS", "10000")),
            max_response_bytes=int(
                os.getenv("WEB_FETCH_MAX_RESPONSE_BYTES", str(10 * 1024 * 1024))
            ),
            allow_private_hosts=_env_flag("WEB_FETCH_ALLOW_PRIVATE_HOSTS", "false"),
            user_agent=os.getenv("WEB_FETCH_USER_AGENT", cls.user_agent),
        )


@dataclass
class Config:
    """Complete application configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    mcp: McpConfig = field(default_factory=McpConfig)
    web_fetch: WebFetchConfig = field(default_factory=WebFetchConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load complete configuration from environment variables."""
        return cls(
            server=ServerConfig.from_env(),
            mcp=McpConfig.from_env(),
            web_fetch=WebFetchConfig.from_env(),
        )


# Global config instance (lazy-loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _config
    _config = None
