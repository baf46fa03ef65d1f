"""Capability router.

Aggregates any number of tool, resource and prompt providers behind one
request surface.  The router keeps no routing table: the owner of a name
or uri is re-derived on every call from the providers' own declarations,
scanning providers in registration order (first match wins).

Misses are asymmetric:

- ``call_tool`` on an undeclared name returns ``ToolResult.error(...)``;
  the call itself succeeds.
- ``read_resource`` / ``get_prompt`` on an undeclared uri/name raise
  :class:`ResourceNotFoundError` / :class:`PromptNotFoundError`.

Usage::

    router = (
        McpRouter("my-server", "1.0.0")
        .with_instructions("Prefix tool names with the provider name.")
        .with_tool_provider(WebFetchProvider())
    )
    router.add_resource_provider(StaticResourceProvider(...))

    result = await router.call_tool("web_fetch", {"url": "https://example.com"})
"""

import logging
from typing import Any, TypeVar

from mcp_router import __version__
from mcp_router.mcp.content import (
    PromptContent,
    PromptDefinition,
    ResourceContent,
    ResourceDefinition,
    ToolDefinition,
    ToolResult,
)
from mcp_router.mcp.errors import PromptNotFoundError, ResourceNotFoundError
from mcp_router.mcp.providers import PromptProvider, ResourceProvider, ToolProvider
from mcp_router.mcp.schemas import (
    PROTOCOL_VERSION,
    InitializeParams,
    InitializeResult,
    LoggingCapability,
    PromptsCapability,
    ResourcesCapability,
    ServerCapabilities,
    ServerInfo,
    ToolsCapability,
)

logger = logging.getLogger(__name__)

DEFAULT_SERVER_NAME = "mcp-router"

_P = TypeVar("_P")


class McpRouter:
    """Routes MCP requests to registered providers."""

    def __init__(
        self,
        name: str = DEFAULT_SERVER_NAME,
        version: str = __version__,
        instructions: str | None = None,
    ) -> None:
        self._name = name
        self._version = version
        self._instructions = instructions
        self._tool_providers: list[ToolProvider] = []
        self._resource_providers: list[ResourceProvider] = []
        self._prompt_providers: list[PromptProvider] = []

    def __repr__(self) -> str:
        return (
            f"McpRouter(name='{self._name}', "
            f"tool_providers={len(self._tool_providers)}, "
            f"resource_providers={len(self._resource_providers)}, "
            f"prompt_providers={len(self._prompt_providers)})"
        )

    # ------------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------------

    @staticmethod
    def _register(providers: list[_P], provider: _P, role: type) -> None:
        """Append ``provider`` to one of the provider lists.

        Every registration path, builder or in-place, ends up here.
        """
        if not isinstance(provider, role):
            raise TypeError(
                f"{type(provider).__name__} does not implement {role.__name__}"
            )
        providers.append(provider)
        logger.debug(
            "Registered %s: %s", role.__name__, provider.name()  # type: ignore[attr-defined]
        )

    def add_tool_provider(self, provider: ToolProvider) -> None:
        self._register(self._tool_providers, provider, ToolProvider)

    def add_resource_provider(self, provider: ResourceProvider) -> None:
        self._register(self._resource_providers, provider, ResourceProvider)

    def add_prompt_provider(self, provider: PromptProvider) -> None:
        self._register(self._prompt_providers, provider, PromptProvider)

    def with_tool_provider(self, provider: ToolProvider) -> "McpRouter":
        self.add_tool_provider(provider)
        return self

    def with_resource_provider(self, provider: ResourceProvider) -> "McpRouter":
        self.add_resource_provider(provider)
        return self

    def with_prompt_provider(self, provider: PromptProvider) -> "McpRouter":
        self.add_prompt_provider(provider)
        return self

    def with_instructions(self, instructions: str) -> "McpRouter":
        self._instructions = instructions
        return self

    # ------------------------------------------------------------------------
    # Server metadata and handshake
    # ------------------------------------------------------------------------

    def server_info(self) -> ServerInfo:
        return ServerInfo(name=self._name, version=self._version)

    def instructions(self) -> str | None:
        return self._instructions

    def capabilities(self) -> ServerCapabilities:
        """Compute the advertised capabilities from the current providers.

        Recomputed on every call so providers added after construction are
        reflected immediately.
        """
        return ServerCapabilities(
            tools=ToolsCapability(list_changed=True) if self._tool_providers else None,
            resources=(
                ResourcesCapability(subscribe=False, list_changed=True)
                if self._resource_providers
                else None
            ),
            prompts=(
                PromptsCapability(list_changed=True) if self._prompt_providers else None
            ),
            logging=LoggingCapability(),
        )

    async def initialize(self, params: InitializeParams) -> InitializeResult:
        """Answer the ``initialize`` handshake.

        No version negotiation takes place: the server's own
        :data:`PROTOCOL_VERSION` is returned whatever the client declared.
        """
        logger.info(
            "MCP client connected: %s v%s (protocol %s)",
            params.client_info.name,
            params.client_info.version,
            params.protocol_version,
        )
        if params.protocol_version != PROTOCOL_VERSION:
            logger.debug(
                "Client requested protocol %s, answering with %s",
                params.protocol_version,
                PROTOCOL_VERSION,
            )
        return InitializeResult(
            protocol_version=PROTOCOL_VERSION,
            capabilities=self.capabilities(),
            server_info=self.server_info(),
            instructions=self._instructions,
        )

    # ------------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------------

    def list_tools(self) -> list[ToolDefinition]:
        """All declared tools, by provider registration order then declaration order.

        Names colliding across providers are listed once per provider.
        """
        return [tool for provider in self._tool_providers for tool in provider.tools()]

    def _find_tool_provider(self, name: str) -> ToolProvider | None:
        for provider in self._tool_providers:
            if any(tool.name == name for tool in provider.tools()):
                return provider
        return None

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Dispatch a tool call to the provider that declares ``name``.

        The provider's result is returned unchanged.  An undeclared name
        yields an ``is_error`` result instead of raising.
        """
        provider = self._find_tool_provider(name)
        if provider is None:
            logger.warning("Tool not found: %s", name)
            return ToolResult.error(f"Tool not found: {name}")

        logger.debug("Dispatching tool %s to provider %s", name, provider.name())
        return await provider.call(name, arguments)

    # ------------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------------

    def list_resources(self) -> list[ResourceDefinition]:
        return [
            resource
            for provider in self._resource_providers
            for resource in provider.resources()
        ]

    def _find_resource_provider(self, uri: str) -> ResourceProvider | None:
        for provider in self._resource_providers:
            if any(resource.uri == uri for resource in provider.resources()):
                return provider
        return None

    async def read_resource(self, uri: str) -> ResourceContent:
        """Read ``uri`` from the provider that declares it.

        Raises:
            ResourceNotFoundError: No registered provider declares ``uri``.
        """
        provider = self._find_resource_provider(uri)
        if provider is None:
            logger.warning("Resource not found: %s", uri)
            raise ResourceNotFoundError(uri)

        logger.debug("Dispatching resource %s to provider %s", uri, provider.name())
        return await provider.read(uri)

    # ------------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------------

    def list_prompts(self) -> list[PromptDefinition]:
        return [
            prompt for provider in self._prompt_providers for prompt in provider.prompts()
        ]

    def _find_prompt_provider(self, name: str) -> PromptProvider | None:
        for provider in self._prompt_providers:
            if any(prompt.name == name for prompt in provider.prompts()):
                return provider
        return None

    async def get_prompt(self, name: str, arguments: dict[str, Any]) -> PromptContent:
        """Render prompt ``name`` via the provider that declares it.

        Raises:
            PromptNotFoundError: No registered provider declares ``name``.
        """
        provider = self._find_prompt_provider(name)
        if provider is None:
            logger.warning("Prompt not found: %s", name)
            raise PromptNotFoundError(name)

        logger.debug("Dispatching prompt %s to provider %s", name, provider.name())
        return await provider.get(name, arguments)
