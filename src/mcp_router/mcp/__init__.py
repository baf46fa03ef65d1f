"""MCP (Model Context Protocol) module.

This module implements the capability router that exposes pluggable
tools, resources and prompts to MCP clients (Claude Desktop, Cursor,
LLM runtimes ...) over JSON-RPC 2.0.

MCP Specification: https://modelcontextprotocol.io/
"""

from mcp_router.mcp.content import (
    ListPromptsResult,
    ListResourcesResult,
    ListToolsResult,
    PromptArgument,
    PromptContent,
    PromptDefinition,
    PromptEmbeddedResource,
    PromptImageContent,
    PromptMessage,
    PromptMessageContent,
    PromptRole,
    PromptTextContent,
    ReadResourceResult,
    ResourceContent,
    ResourceDefinition,
    ToolContent,
    ToolDefinition,
    ToolEmbeddedResource,
    ToolImageContent,
    ToolResult,
    ToolTextContent,
)
from mcp_router.mcp.errors import (
    InvalidParameterError,
    McpError,
    MissingParameterError,
    NotFoundError,
    PromptNotFoundError,
    ProviderError,
    ResourceNotFoundError,
    ToolNotFoundError,
)
from mcp_router.mcp.handlers import (
    InvalidMessageError,
    McpMethodHandler,
    decode_request,
)
from mcp_router.mcp.host import McpHost, McpHostError
from mcp_router.mcp.providers import PromptProvider, ResourceProvider, ToolProvider
from mcp_router.mcp.router import McpRouter
from mcp_router.mcp.schemas import (
    PROTOCOL_VERSION,
    CallToolParams,
    ClientCapabilities,
    ClientInfo,
    GetPromptParams,
    InitializeParams,
    InitializeResult,
    JsonRpcError,
    JsonRpcErrorCode,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    LoggingCapability,
    LoggingMessageParams,
    LogLevel,
    PaginationParams,
    PromptsCapability,
    ReadResourceParams,
    RequestId,
    ResourcesCapability,
    RootsCapability,
    SamplingCapability,
    ServerCapabilities,
    ServerInfo,
    SetLevelParams,
    ToolsCapability,
    create_error_response,
    create_success_response,
)

__all__ = [
    # Router, handler, host
    "McpRouter",
    "McpMethodHandler",
    "McpHost",
    "McpHostError",
    "InvalidMessageError",
    "decode_request",
    # Provider roles
    "ToolProvider",
    "ResourceProvider",
    "PromptProvider",
    # Errors
    "McpError",
    "NotFoundError",
    "ToolNotFoundError",
    "ResourceNotFoundError",
    "PromptNotFoundError",
    "InvalidParameterError",
    "MissingParameterError",
    "ProviderError",
    # JSON-RPC types
    "RequestId",
    "JsonRpcError",
    "JsonRpcErrorCode",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "create_error_response",
    "create_success_response",
    # Capabilities and handshake
    "PROTOCOL_VERSION",
    "ServerCapabilities",
    "ClientCapabilities",
    "ToolsCapability",
    "ResourcesCapability",
    "PromptsCapability",
    "LoggingCapability",
    "RootsCapability",
    "SamplingCapability",
    "ServerInfo",
    "ClientInfo",
    "InitializeParams",
    "InitializeResult",
    "LogLevel",
    "SetLevelParams",
    "LoggingMessageParams",
    # Method params
    "PaginationParams",
    "CallToolParams",
    "ReadResourceParams",
    "GetPromptParams",
    # Content model
    "ToolDefinition",
    "ToolContent",
    "ToolTextContent",
    "ToolImageContent",
    "ToolEmbeddedResource",
    "ToolResult",
    "ListToolsResult",
    "ResourceDefinition",
    "ResourceContent",
    "ListResourcesResult",
    "ReadResourceResult",
    "PromptArgument",
    "PromptDefinition",
    "PromptRole",
    "PromptMessage",
    "PromptMessageContent",
    "PromptTextContent",
    "PromptImageContent",
    "PromptEmbeddedResource",
    "PromptContent",
    "ListPromptsResult",
]
