"""In-process MCP host.

Drives an :class:`~mcp_router.mcp.handlers.McpMethodHandler` from the
client side using the real wire format, so an application can consume
its own router exactly as a remote MCP client would: handshake first,
then ``tools/list`` and ``tools/call``.

Usage::

    host = await McpHost.start(router)
    print([tool.name for tool in host.tools])
    text = await host.call_tool("web_fetch", {"url": "https://example.com"})
"""

import itertools
import json
import logging
from typing import Any

from mcp_router import __version__
from mcp_router.mcp.content import ListToolsResult, ToolDefinition, ToolResult
from mcp_router.mcp.handlers import McpMethodHandler
from mcp_router.mcp.router import McpRouter
from mcp_router.mcp.schemas import (
    PROTOCOL_VERSION,
    ClientCapabilities,
    ClientInfo,
    InitializeParams,
    InitializeResult,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_INFO = ClientInfo(name="mcp-router-host", version=__version__)


class McpHostError(Exception):
    """A request sent by the host was answered with a JSON-RPC error."""

    def __init__(self, method: str, error: JsonRpcError) -> None:
        super().__init__(f"{method} failed ({error.code}): {error.message}")
        self.method = method
        self.error = error


class McpHost:
    """Client side of an in-process MCP session."""

    def __init__(
        self,
        handler: McpMethodHandler,
        client_info: ClientInfo = DEFAULT_CLIENT_INFO,
    ) -> None:
        self._handler = handler
        self._client_info = client_info
        self._ids = itertools.count(1)
        self._tools: list[ToolDefinition] = []
        self._server: InitializeResult | None = None

    @classmethod
    async def start(
        cls,
        router: McpRouter,
        client_info: ClientInfo = DEFAULT_CLIENT_INFO,
    ) -> "McpHost":
        """Create a dedicated handler session for ``router`` and connect to it."""
        host = cls(McpMethodHandler(router), client_info)
        await host.connect()
        return host

    @property
    def tools(self) -> list[ToolDefinition]:
        return list(self._tools)

    @property
    def server(self) -> InitializeResult | None:
        return self._server

    async def connect(self) -> InitializeResult:
        """Run the initialize handshake and cache the server's tool list."""
        params = InitializeParams(
            protocol_version=PROTOCOL_VERSION,
            capabilities=ClientCapabilities(),
            client_info=self._client_info,
        )
        result = await self.request("initialize", params.to_wire())
        self._server = InitializeResult.model_validate(result)
        await self.notify("notifications/initialized")
        logger.info(
            "Connected to MCP server %s v%s",
            self._server.server_info.name,
            self._server.server_info.version,
        )

        await self.refresh_tools()
        return self._server

    async def refresh_tools(self) -> list[ToolDefinition]:
        if self._server is not None and self._server.capabilities.tools is None:
            self._tools = []
            return self.tools
        listing = ListToolsResult.model_validate(await self.request("tools/list"))
        self._tools = listing.tools
        return self.tools

    async def request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send a request and return its ``result``.

        Raises:
            McpHostError: The server answered with a JSON-RPC error.
        """
        request = JsonRpcRequest(id=next(self._ids), method=method, params=params)
        raw = await self._handler.handle_message(json.dumps(request.to_wire()))
        response = JsonRpcResponse.model_validate(json.loads(raw))
        if response.error is not None:
            raise McpHostError(method, response.error)
        return response.result

    async def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        notification = JsonRpcNotification(method=method, params=params)
        await self._handler.handle_message(json.dumps(notification.to_wire()))

    async def call_tool_result(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> ToolResult:
        result = await self.request(
            "tools/call", {"name": name, "arguments": arguments or {}}
        )
        return ToolResult.model_validate(result)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        """Call a tool and flatten its content into text.

        A tool reporting ``isError`` still returns its text; only protocol
        errors raise.
        """
        result = await self.call_tool_result(name, arguments)
        return result.render_text()
