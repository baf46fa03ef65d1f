"""MCP protocol pydantic schemas.

JSON-RPC 2.0 envelope models, the capability flags exchanged during the
``initialize`` handshake, and the request parameter models for the
standard MCP methods.

Wire keys use the MCP camelCase spelling (``protocolVersion``,
``listChanged`` ...).  Every model accepts both the alias and the Python
field name, and :meth:`McpModel.to_wire` drops absent optional fields
instead of emitting ``null``.
"""

from enum import Enum, IntEnum
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

# MCP protocol revision this server speaks.  ``initialize`` always answers
# with this value regardless of what the client asked for.
PROTOCOL_VERSION = "2024-11-05"

JSONRPC_VERSION = "2.0"

# Correlation id: caller supplied, opaque, either a string or an integer.
RequestId = str | int


# ============================================================================
# Base model
# ============================================================================


class McpModel(BaseModel):
    """Base class for every protocol model."""

    model_config = {"populate_by_name": True}

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire aliases, omitting absent optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ============================================================================
# JSON-RPC 2.0 Error Codes
# ============================================================================


class JsonRpcErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


# ============================================================================
# JSON-RPC 2.0 Base Models
# ============================================================================


class JsonRpcRequest(McpModel):
    """JSON-RPC 2.0 request object.

    A request without an ``id`` is a notification and never gets a response.
    """

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId | None = None
    method: str
    params: dict[str, Any] | list[Any] | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcNotification(McpModel):
    """JSON-RPC 2.0 notification (a request that expects no response)."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: dict[str, Any] | None = None


class JsonRpcError(McpModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any | None = None

    @classmethod
    def parse_error(cls, message: str) -> "JsonRpcError":
        return cls(code=JsonRpcErrorCode.PARSE_ERROR, message=message)

    @classmethod
    def invalid_request(cls, message: str) -> "JsonRpcError":
        return cls(code=JsonRpcErrorCode.INVALID_REQUEST, message=message)

    @classmethod
    def method_not_found(cls, message: str) -> "JsonRpcError":
        return cls(code=JsonRpcErrorCode.METHOD_NOT_FOUND, message=message)

    @classmethod
    def invalid_params(cls, message: str) -> "JsonRpcError":
        return cls(code=JsonRpcErrorCode.INVALID_PARAMS, message=message)

    @classmethod
    def internal_error(cls, message: str) -> "JsonRpcError":
        return cls(code=JsonRpcErrorCode.INTERNAL_ERROR, message=message)


class JsonRpcResponse(McpModel):
    """JSON-RPC 2.0 response object.

    Carries exactly one of ``result`` or ``error``.  A success response may
    legitimately have a ``null`` result, so the serialized form decides by
    looking at ``error`` alone.
    """

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId | None = None
    result: Any | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _check_result_or_error(self) -> "JsonRpcResponse":
        if self.error is not None and self.result is not None:
            raise ValueError("A JSON-RPC response cannot carry both result and error")
        return self

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def model_dump(self, **kwargs) -> dict[str, Any]:
        """Custom dump to exclude None result/error based on which is set."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.to_wire()
        else:
            data["result"] = self.result
        return data

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump()


# ============================================================================
# Capability Model
# ============================================================================


class ToolsCapability(McpModel):
    list_changed: bool | None = Field(default=None, alias="listChanged")


class ResourcesCapability(McpModel):
    subscribe: bool | None = None
    list_changed: bool | None = Field(default=None, alias="listChanged")


class PromptsCapability(McpModel):
    list_changed: bool | None = Field(default=None, alias="listChanged")


class LoggingCapability(McpModel):
    pass


class ServerCapabilities(McpModel):
    """Optional features advertised by the server.

    ``tools``, ``resources`` and ``prompts`` are present only while at least
    one matching provider is registered; ``logging`` is always advertised.
    """

    tools: ToolsCapability | None = None
    resources: ResourcesCapability | None = None
    prompts: PromptsCapability | None = None
    logging: LoggingCapability | None = None


class RootsCapability(McpModel):
    list_changed: bool | None = Field(default=None, alias="listChanged")


class SamplingCapability(McpModel):
    pass


class ClientCapabilities(McpModel):
    """Optional features advertised by the client.

    Unknown capability keys are kept so newer clients are not rejected.
    """

    model_config = {"extra": "allow"}

    roots: RootsCapability | None = None
    sampling: SamplingCapability | None = None


# ============================================================================
# Initialize Handshake
# ============================================================================


class ServerInfo(McpModel):
    """MCP server information returned during initialization."""

    name: str
    version: str


class ClientInfo(McpModel):
    """MCP client information sent during initialization."""

    name: str
    version: str


class InitializeParams(McpModel):
    """Parameters for the initialize method."""

    protocol_version: str = Field(alias="protocolVersion")
    capabilities: ClientCapabilities = Field(default_factory=ClientCapabilities)
    client_info: ClientInfo = Field(alias="clientInfo")


class InitializeResult(McpModel):
    """Result of the initialize method."""

    protocol_version: str = Field(default=PROTOCOL_VERSION, alias="protocolVersion")
    capabilities: ServerCapabilities = Field(default_factory=ServerCapabilities)
    server_info: ServerInfo = Field(alias="serverInfo")
    instructions: str | None = None


# ============================================================================
# Logging
# ============================================================================


class LogLevel(str, Enum):
    """Syslog-style severities used by the MCP logging utility."""

    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    ALERT = "alert"
    EMERGENCY = "emergency"

    def to_logging_level(self) -> int:
        """Return the closest stdlib ``logging`` level number."""
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS: dict[LogLevel, int] = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.NOTICE: 25,
    LogLevel.WARNING: 30,
    LogLevel.ERROR: 40,
    LogLevel.CRITICAL: 50,
    LogLevel.ALERT: 50,
    LogLevel.EMERGENCY: 50,
}


class SetLevelParams(McpModel):
    """Parameters for the logging/setLevel method."""

    level: LogLevel


class LoggingMessageParams(McpModel):
    """Payload of a ``notifications/message`` log notification."""

    level: LogLevel
    logger: str | None = None
    data: Any | None = None


# ============================================================================
# Method Parameters
# ============================================================================


class PaginationParams(McpModel):
    """Optional cursor accepted by the list methods."""

    cursor: str | None = None


class CallToolParams(McpModel):
    """Parameters for tools/call method."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ReadResourceParams(McpModel):
    """Parameters for resources/read method."""

    uri: str


class GetPromptParams(McpModel):
    """Parameters for prompts/get method."""

    name: str
    arguments: dict[str, str] = Field(default_factory=dict)


# ============================================================================
# Helper Functions
# ============================================================================


def create_error_response(
    request_id: RequestId | None,
    code: int,
    message: str,
    data: Any | None = None,
) -> JsonRpcResponse:
    """Create a JSON-RPC error response."""
    return JsonRpcResponse(
        id=request_id,
        error=JsonRpcError(code=code, message=message, data=data),
    )


def create_success_response(
    request_id: RequestId | None,
    result: Any,
) -> JsonRpcResponse:
    """Create a JSON-RPC success response."""
    return JsonRpcResponse(id=request_id, result=result)
