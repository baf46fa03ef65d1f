"""MCP Protocol method handlers.

Implements the JSON-RPC 2.0 method handlers for the MCP protocol on top
of an :class:`~mcp_router.mcp.router.McpRouter`.  This is the transport
boundary of the error taxonomy:

- malformed envelopes, unknown methods and bad params become JSON-RPC
  errors with the reserved codes;
- tool failures stay inside a successful response (``isError: true``);
- resource/prompt misses raised by the router become ``INVALID_PARAMS``.
"""

import json
import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from mcp_router.mcp.content import (
    ListPromptsResult,
    ListResourcesResult,
    ListToolsResult,
    ReadResourceResult,
)
from mcp_router.mcp.errors import McpError
from mcp_router.mcp.router import McpRouter
from mcp_router.mcp.schemas import (
    CallToolParams,
    GetPromptParams,
    InitializeParams,
    JsonRpcErrorCode,
    JsonRpcRequest,
    JsonRpcResponse,
    PaginationParams,
    ReadResourceParams,
    SetLevelParams,
    create_error_response,
    create_success_response,
)

logger = logging.getLogger(__name__)

# Methods allowed before the initialize handshake has completed.
_PRE_INITIALIZE_METHODS = frozenset(
    {"initialize", "initialized", "notifications/initialized", "ping"}
)

MethodHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class InvalidMessageError(Exception):
    """Raised when an inbound message is not a valid JSON-RPC request.

    Carries the ready-made error response the transport should send back.
    """

    def __init__(self, response: JsonRpcResponse) -> None:
        super().__init__(response.error.message if response.error else "")
        self.response = response


def decode_request(raw: str | bytes | dict[str, Any]) -> JsonRpcRequest:
    """Decode a raw message into a :class:`JsonRpcRequest`.

    Args:
        raw: Message text/bytes, or an already parsed JSON value.

    Returns:
        The validated request.

    Raises:
        InvalidMessageError: With a ``PARSE_ERROR`` response for invalid JSON,
            or an ``INVALID_REQUEST`` response for a non-object or a
            structurally invalid request.
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as parse_error:
            logger.error("MCP parse error: %s", parse_error)
            raise InvalidMessageError(
                create_error_response(
                    None,
                    JsonRpcErrorCode.PARSE_ERROR,
                    f"Parse error: {parse_error}",
                )
            ) from parse_error
    else:
        data = raw

    if not isinstance(data, dict):
        raise InvalidMessageError(
            create_error_response(
                None,
                JsonRpcErrorCode.INVALID_REQUEST,
                "Request must be a JSON object",
            )
        )

    try:
        return JsonRpcRequest.model_validate(data)
    except ValidationError as validation_error:
        logger.error("MCP invalid request: %s", validation_error)
        request_id = data.get("id")
        if not isinstance(request_id, (str, int)) or isinstance(request_id, bool):
            request_id = None
        raise InvalidMessageError(
            create_error_response(
                request_id,
                JsonRpcErrorCode.INVALID_REQUEST,
                f"Invalid request: {validation_error}",
            )
        ) from validation_error


def _parse_params(model: type[BaseModel], params: dict[str, Any]) -> Any:
    """Validate ``params`` against ``model``, raising ValueError on failure."""
    try:
        return model.model_validate(params)
    except ValidationError as validation_error:
        raise ValueError(
            f"Invalid {model.__name__} params: {validation_error}"
        ) from validation_error


class McpMethodHandler:
    """Handler for MCP JSON-RPC methods.

    Routes incoming JSON-RPC requests to the matching router operation.
    One handler instance represents one protocol session: when
    ``require_initialize`` is set, everything but ``initialize``/``ping``
    is refused until the handshake has happened.
    """

    def __init__(self, router: McpRouter, *, require_initialize: bool = True) -> None:
        """Initialize the method handler.

        Args:
            router: Router the methods are dispatched to.
            require_initialize: Refuse capability methods before ``initialize``.
        """
        self.router = router
        self.require_initialize = require_initialize
        self._initialized = False
        self._client_info: dict[str, Any] | None = None
        self._handler_map: dict[str, MethodHandler] = {
            "initialize": self._handle_initialize,
            "initialized": self._handle_initialized,
            "notifications/initialized": self._handle_initialized,
            "ping": self._handle_ping,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
            "resources/list": self._handle_resources_list,
            "resources/read": self._handle_resources_read,
            "prompts/list": self._handle_prompts_list,
            "prompts/get": self._handle_prompts_get,
            "logging/setLevel": self._handle_set_level,
        }

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def client_info(self) -> dict[str, Any] | None:
        return self._client_info

    def supported_methods(self) -> list[str]:
        return sorted(self._handler_map)

    async def handle_request(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Route a JSON-RPC request to the appropriate handler.

        Args:
            request: The JSON-RPC request to handle.

        Returns:
            JSON-RPC response with result or error.  Transports drop the
            response when the request was a notification.
        """
        method = request.method
        logger.debug("MCP request: method=%s, id=%s", method, request.id)

        handler = self._handler_map.get(method)
        if handler is None:
            logger.warning("MCP method not found: %s", method)
            return create_error_response(
                request.id,
                JsonRpcErrorCode.METHOD_NOT_FOUND,
                f"Method not found: {method}",
            )

        if (
            self.require_initialize
            and not self._initialized
            and method not in _PRE_INITIALIZE_METHODS
        ):
            logger.warning("MCP request before initialize: %s", method)
            return create_error_response(
                request.id,
                JsonRpcErrorCode.INVALID_REQUEST,
                "Server not initialized",
            )

        if request.params is None:
            params: dict[str, Any] = {}
        elif isinstance(request.params, dict):
            params = request.params
        else:
            return create_error_response(
                request.id,
                JsonRpcErrorCode.INVALID_PARAMS,
                "MCP methods take named params (a JSON object)",
            )

        try:
            result = await handler(params)
            return create_success_response(request.id, result)
        except McpError as mcp_error:
            logger.error("MCP %s failed: %s", method, mcp_error)
            return create_error_response(
                request.id,
                mcp_error.rpc_code,
                str(mcp_error),
                mcp_error.to_error_data(),
            )
        except ValueError as value_error:
            logger.error("MCP invalid params: %s", value_error)
            return create_error_response(
                request.id,
                JsonRpcErrorCode.INVALID_PARAMS,
                str(value_error),
            )
        except Exception as handler_error:
            logger.exception("MCP internal error: %s", handler_error)
            return create_error_response(
                request.id,
                JsonRpcErrorCode.INTERNAL_ERROR,
                f"Internal error: {handler_error}",
            )

    async def handle_message(self, raw: str | bytes) -> str | None:
        """Decode, dispatch and encode one wire message.

        Returns:
            The serialized response, or ``None`` for notifications.
        """
        try:
            request = decode_request(raw)
        except InvalidMessageError as invalid:
            return json.dumps(invalid.response.to_wire())

        response = await self.handle_request(request)
        if request.is_notification:
            return None
        return json.dumps(response.to_wire())

    async def _handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the initialize method.

        Args:
            params: Initialize parameters including clientInfo and protocolVersion.

        Returns:
            Server capabilities and info.
        """
        if not params:
            raise ValueError("Missing initialize params")
        init_params: InitializeParams = _parse_params(InitializeParams, params)
        self._client_info = init_params.client_info.to_wire()

        result = await self.router.initialize(init_params)
        self._initialized = True
        return result.to_wire()

    async def _handle_initialized(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the initialized notification."""
        logger.info("MCP client initialization complete")
        return {}

    async def _handle_ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def _handle_tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the tools/list method.

        The cursor is accepted but no pagination happens: every tool is
        returned and ``nextCursor`` is left out.
        """
        _parse_params(PaginationParams, params)
        result = ListToolsResult(tools=self.router.list_tools())
        return result.to_wire()

    async def _handle_tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the tools/call method.

        Unknown tools and failing tools both produce a successful response
        whose result has ``isError: true``.
        """
        call_params: CallToolParams = _parse_params(CallToolParams, params)
        result = await self.router.call_tool(call_params.name, call_params.arguments)
        return result.to_wire()

    async def _handle_resources_list(self, params: dict[str, Any]) -> dict[str, Any]:
        _parse_params(PaginationParams, params)
        result = ListResourcesResult(resources=self.router.list_resources())
        return result.to_wire()

    async def _handle_resources_read(self, params: dict[str, Any]) -> dict[str, Any]:
        read_params: ReadResourceParams = _parse_params(ReadResourceParams, params)
        content = await self.router.read_resource(read_params.uri)
        return ReadResourceResult(contents=[content]).to_wire()

    async def _handle_prompts_list(self, params: dict[str, Any]) -> dict[str, Any]:
        _parse_params(PaginationParams, params)
        result = ListPromptsResult(prompts=self.router.list_prompts())
        return result.to_wire()

    async def _handle_prompts_get(self, params: dict[str, Any]) -> dict[str, Any]:
        get_params: GetPromptParams = _parse_params(GetPromptParams, params)
        content = await self.router.get_prompt(get_params.name, get_params.arguments)
        return content.to_wire()

    async def _handle_set_level(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle logging/setLevel by adjusting the package logger."""
        level_params: SetLevelParams = _parse_params(SetLevelParams, params)
        logging.getLogger("mcp_router").setLevel(level_params.level.to_logging_level())
        logger.info("MCP log level set to %s", level_params.level.value)
        return {}
