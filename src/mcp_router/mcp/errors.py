"""Exceptions raised by the router and by providers.

Each exception carries the JSON-RPC error code the transport boundary
should answer with (``rpc_code``) and a short machine-readable ``code``
that ends up in the error's ``data`` field.

Tool misses never raise: the router answers them with an ``is_error``
:class:`~mcp_router.mcp.content.ToolResult`.  Resource and prompt misses
raise :class:`ResourceNotFoundError` / :class:`PromptNotFoundError`.
"""

from mcp_router.mcp.schemas import JsonRpcErrorCode


class McpError(Exception):
    """Base class for MCP router errors."""

    rpc_code: JsonRpcErrorCode = JsonRpcErrorCode.INTERNAL_ERROR
    code: str = "INTERNAL"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_error_data(self) -> dict[str, str]:
        return {"code": self.code}


class NotFoundError(McpError, LookupError):
    """A name or uri is not declared by any registered provider."""

    rpc_code = JsonRpcErrorCode.INVALID_PARAMS
    code = "NOT_FOUND"


class ToolNotFoundError(NotFoundError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Tool not found: {name}")
        self.name = name


class ResourceNotFoundError(NotFoundError):
    def __init__(self, uri: str) -> None:
        super().__init__(f"Resource not found: {uri}")
        self.uri = uri


class PromptNotFoundError(NotFoundError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Prompt not found: {name}")
        self.name = name


class InvalidParameterError(McpError, ValueError):
    rpc_code = JsonRpcErrorCode.INVALID_PARAMS
    code = "INVALID_PARAMETER"


class MissingParameterError(InvalidParameterError):
    code = "MISSING_PARAMETER"

    def __init__(self, parameter: str) -> None:
        super().__init__(f"Missing required parameter: {parameter}")
        self.parameter = parameter


class ProviderError(McpError):
    """A backend integration failed while serving a resource or prompt."""

    code = "PROVIDER_ERROR"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"Provider '{provider}' failed: {message}")
        self.provider = provider
