"""MCP content model.

Capability definitions (tools, resources, prompts) and the content
vocabularies returned when they are used.  Tool content and prompt message
content are structurally alike but are separate types.
"""

import base64
import json
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import Field, model_validator

from mcp_router.mcp.schemas import McpModel


def _default_input_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}}


# ============================================================================
# Resources
# ============================================================================


class ResourceDefinition(McpModel):
    """A readable artifact addressed by ``uri``."""

    uri: str
    name: str
    description: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")


class ResourceContent(McpModel):
    """Contents of a resource: exactly one of ``text`` or base64 ``blob``."""

    uri: str
    mime_type: str | None = Field(default=None, alias="mimeType")
    text: str | None = None
    blob: str | None = None

    @model_validator(mode="after")
    def _check_text_or_blob(self) -> "ResourceContent":
        if self.text is not None and self.blob is not None:
            raise ValueError("ResourceContent cannot carry both 'text' and 'blob'")
        if self.text is None and self.blob is None:
            raise ValueError("ResourceContent requires one of 'text' or 'blob'")
        return self

    @classmethod
    def from_text(
        cls, uri: str, text: str, mime_type: str | None = None
    ) -> "ResourceContent":
        return cls(uri=uri, mime_type=mime_type, text=text)

    @classmethod
    def from_blob(
        cls, uri: str, data: bytes | str, mime_type: str | None = None
    ) -> "ResourceContent":
        """Build binary contents; raw bytes are base64-encoded first."""
        if isinstance(data, bytes):
            data = base64.b64encode(data).decode("ascii")
        return cls(uri=uri, mime_type=mime_type, blob=data)


class ListResourcesResult(McpModel):
    """Result of resources/list method."""

    resources: list[ResourceDefinition]
    next_cursor: str | None = Field(default=None, alias="nextCursor")


class ReadResourceResult(McpModel):
    """Result of resources/read method."""

    contents: list[ResourceContent]


# ============================================================================
# Tools
# ============================================================================


class ToolDefinition(McpModel):
    """A callable capability; ``name`` is the routing key."""

    name: str
    description: str | None = None
    input_schema: dict[str, Any] = Field(
        default_factory=_default_input_schema, alias="inputSchema"
    )

    def with_description(self, description: str) -> "ToolDefinition":
        return self.model_copy(update={"description": description})

    def with_schema(self, schema: dict[str, Any]) -> "ToolDefinition":
        return self.model_copy(update={"input_schema": schema})


class ToolTextContent(McpModel):
    type: Literal["text"] = "text"
    text: str


class ToolImageContent(McpModel):
    type: Literal["image"] = "image"
    data: str
    mime_type: str = Field(alias="mimeType")


class ToolEmbeddedResource(McpModel):
    type: Literal["resource"] = "resource"
    resource: ResourceContent


ToolContent = Annotated[
    ToolTextContent | ToolImageContent | ToolEmbeddedResource,
    Field(discriminator="type"),
]


class ToolResult(McpModel):
    """Outcome of a tool call.

    ``is_error`` marks a domain failure: the tool ran (or could not be
    found) and reports the problem as ordinary content.  It always travels
    inside a successful JSON-RPC response, never as a JSON-RPC error.
    """

    content: list[ToolContent] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        return cls(content=[ToolTextContent(text=text)])

    @classmethod
    def json(cls, value: Any) -> "ToolResult":  # type: ignore[override]
        """Wrap ``value`` as one pretty-printed JSON text part."""
        rendered = json.dumps(value, indent=2, ensure_ascii=False, default=str)
        return cls(content=[ToolTextContent(text=rendered)])

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(content=[ToolTextContent(text=message)], is_error=True)

    @classmethod
    def image(cls, data: str, mime_type: str) -> "ToolResult":
        return cls(content=[ToolImageContent(data=data, mime_type=mime_type)])

    def render_text(self) -> str:
        """Flatten the content parts into one newline-joined string.

        Non-text parts are shown as ``[Image: <mime>]`` / ``[Resource: <uri>]``.
        """
        parts: list[str] = []
        for item in self.content:
            if isinstance(item, ToolTextContent):
                parts.append(item.text)
            elif isinstance(item, ToolImageContent):
                parts.append(f"[Image: {item.mime_type}]")
            else:
                parts.append(f"[Resource: {item.resource.uri}]")
        return "\n".join(parts)


class ListToolsResult(McpModel):
    """Result of tools/list method."""

    tools: list[ToolDefinition]
    next_cursor: str | None = Field(default=None, alias="nextCursor")


# ============================================================================
# Prompts
# ============================================================================


class PromptArgument(McpModel):
    name: str
    description: str | None = None
    required: bool = False


class PromptDefinition(McpModel):
    """A parameterized message template; ``name`` is the routing key."""

    name: str
    description: str | None = None
    arguments: list[PromptArgument] | None = None


class PromptRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class PromptTextContent(McpModel):
    type: Literal["text"] = "text"
    text: str


class PromptImageContent(McpModel):
    type: Literal["image"] = "image"
    data: str
    mime_type: str = Field(alias="mimeType")


class PromptEmbeddedResource(McpModel):
    type: Literal["resource"] = "resource"
    resource: ResourceContent


PromptMessageContent = Annotated[
    PromptTextContent | PromptImageContent | PromptEmbeddedResource,
    Field(discriminator="type"),
]


class PromptMessage(McpModel):
    role: PromptRole
    content: PromptMessageContent

    @classmethod
    def user(cls, text: str) -> "PromptMessage":
        return cls(role=PromptRole.USER, content=PromptTextContent(text=text))

    @classmethod
    def assistant(cls, text: str) -> "PromptMessage":
        return cls(role=PromptRole.ASSISTANT, content=PromptTextContent(text=text))


class PromptContent(McpModel):
    """Rendered prompt returned by prompts/get."""

    description: str | None = None
    messages: list[PromptMessage]


class ListPromptsResult(McpModel):
    """Result of prompts/list method."""

    prompts: list[PromptDefinition]
    next_cursor: str | None = Field(default=None, alias="nextCursor")
