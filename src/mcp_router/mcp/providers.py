"""Provider roles implemented by backend integrations.

A backend integration (search client, database connector, messaging
client ...) exposes its capabilities by implementing one or more of the
three roles below and being registered on an
:class:`~mcp_router.mcp.router.McpRouter`.

Contract shared by all roles:

- The router only calls ``call`` / ``read`` / ``get`` with a name or uri
  the provider itself declared in ``tools()`` / ``resources()`` /
  ``prompts()``.
- A provider must still fail cleanly (return an error result or raise)
  when called with a foreign name; it must never take the process down.
- Providers receive their pre-authenticated backend clients at
  construction time and must tolerate concurrent invocations.

Extending::

    class EchoProvider(ToolProvider):
        def name(self) -> str:
            return "echo"

        def tools(self) -> list[ToolDefinition]:
            return [ToolDefinition(name="echo_say")]

        async def call(self, name, arguments):
            return ToolResult.text(arguments.get("text", ""))

    router = McpRouter("my-server", "1.0.0").with_tool_provider(EchoProvider())
"""

import abc
from typing import Any

from mcp_router.mcp.content import (
    PromptContent,
    PromptDefinition,
    ResourceContent,
    ResourceDefinition,
    ToolDefinition,
    ToolResult,
)


class ToolProvider(abc.ABC):
    """Supplies callable tools."""

    @abc.abstractmethod
    def name(self) -> str:
        """Provider identifier, conventionally used to prefix tool names."""

    def description(self) -> str:
        """Human-readable summary of what the provider offers."""
        return ""

    @abc.abstractmethod
    def tools(self) -> list[ToolDefinition]:
        """Tools this provider currently declares, in declaration order."""

    @abc.abstractmethod
    async def call(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Run tool ``name``.

        Backend failures (network, auth, rate limiting) should be reported
        as ``ToolResult.error(...)`` so the calling model can see and adapt
        to them.
        """


class ResourceProvider(abc.ABC):
    """Supplies readable resources addressed by uri."""

    @abc.abstractmethod
    def name(self) -> str:
        """Provider identifier."""

    @abc.abstractmethod
    def resources(self) -> list[ResourceDefinition]:
        """Resources this provider currently declares."""

    @abc.abstractmethod
    async def read(self, uri: str) -> ResourceContent:
        """Read resource ``uri``.

        Raises:
            McpError: Backend failures propagate (typically as
                :class:`~mcp_router.mcp.errors.ProviderError`).
        """


class PromptProvider(abc.ABC):
    """Supplies parameterized prompt templates."""

    @abc.abstractmethod
    def name(self) -> str:
        """Provider identifier."""

    @abc.abstractmethod
    def prompts(self) -> list[PromptDefinition]:
        """Prompts this provider currently declares."""

    @abc.abstractmethod
    async def get(self, name: str, arguments: dict[str, Any]) -> PromptContent:
        """Render prompt ``name`` with ``arguments``."""
