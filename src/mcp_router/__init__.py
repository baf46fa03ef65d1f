"""Capability router exposing pluggable tools, resources and prompts over MCP.

Backend integrations implement the provider roles in
:mod:`mcp_router.mcp.providers`; :class:`mcp_router.mcp.McpRouter`
aggregates them and the HTTP (Robyn) or stdio transports serve the
router to MCP clients.

Version is read from ``pyproject.toml`` via ``importlib.metadata``;
that file is the **single source of truth**.  Never hardcode version
strings elsewhere; always import ``__version__`` from this module.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("mcp-router")
except PackageNotFoundError:
    # Running from source before the package has been installed.
    __version__ = "0.0.0-dev"

__all__ = [
    "__version__",
]
