"""Tests for the JSON-RPC method handler and request decoding."""

import json
import logging
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from mcp_router.mcp import (
    InvalidMessageError,
    JsonRpcErrorCode,
    JsonRpcRequest,
    McpMethodHandler,
    McpRouter,
    decode_request,
)
from mcp_router.tests.conftest_providers import MockToolProvider


async def _initialize(handler: McpMethodHandler, params: dict) -> None:
    response = await handler.handle_request(
        JsonRpcRequest(id=0, method="initialize", params=params)
    )
    assert response.error is None


# ============================================================================
# decode_request
# ============================================================================


class TestDecodeRequest:
    """Tests for raw message decoding."""

    def test_decodes_text(self):
        request = decode_request('{"jsonrpc": "2.0", "id": 1, "method": "ping"}')
        assert request.id == 1
        assert request.method == "ping"

    def test_decodes_bytes_and_dicts(self):
        assert decode_request(b'{"jsonrpc": "2.0", "method": "ping"}').is_notification
        assert decode_request({"jsonrpc": "2.0", "id": "a", "method": "x"}).id == "a"

    def test_invalid_json_is_parse_error(self):
        with pytest.raises(InvalidMessageError) as exc_info:
            decode_request("{not json")
        wire = exc_info.value.response.to_wire()
        assert wire["id"] is None
        assert wire["error"]["code"] == JsonRpcErrorCode.PARSE_ERROR

    def test_non_object_is_invalid_request(self):
        with pytest.raises(InvalidMessageError) as exc_info:
            decode_request("[1, 2, 3]")
        error = exc_info.value.response.error
        assert error.code == JsonRpcErrorCode.INVALID_REQUEST
        assert error.message == "Request must be a JSON object"

    def test_invalid_shape_keeps_request_id(self):
        with pytest.raises(InvalidMessageError) as exc_info:
            decode_request('{"jsonrpc": "2.0", "id": 5}')
        response = exc_info.value.response
        assert response.id == 5
        assert response.error.code == JsonRpcErrorCode.INVALID_REQUEST

    def test_invalid_shape_drops_unusable_id(self):
        with pytest.raises(InvalidMessageError) as exc_info:
            decode_request('{"jsonrpc": "1.0", "id": {"nested": true}, "method": "x"}')
        assert exc_info.value.response.id is None


# ============================================================================
# Session gate and handshake
# ============================================================================


class TestInitialize:
    """Tests for the initialize handshake and the session gate."""

    @pytest.mark.asyncio
    async def test_initialize(self, handler, initialize_params):
        response = await handler.handle_request(
            JsonRpcRequest(id="1", method="initialize", params=initialize_params)
        )
        assert response.error is None
        assert response.result["protocolVersion"] == "2024-11-05"
        assert response.result["serverInfo"] == {
            "name": "test-server",
            "version": "1.0.0",
        }
        assert set(response.result["capabilities"]) == {
            "tools",
            "resources",
            "prompts",
            "logging",
        }
        assert handler.initialized
        assert handler.client_info == {"name": "test-client", "version": "0.1.0"}

    @pytest.mark.asyncio
    async def test_initialize_requires_params(self, handler):
        response = await handler.handle_request(
            JsonRpcRequest(id=1, method="initialize")
        )
        assert response.error.code == JsonRpcErrorCode.INVALID_PARAMS
        assert not handler.initialized

    @pytest.mark.asyncio
    async def test_initialize_rejects_invalid_params(self, handler):
        response = await handler.handle_request(
            JsonRpcRequest(id=1, method="initialize", params={"protocolVersion": 1})
        )
        assert response.error.code == JsonRpcErrorCode.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_methods_refused_before_initialize(self, handler):
        response = await handler.handle_request(JsonRpcRequest(id=1, method="tools/list"))
        assert response.error.code == JsonRpcErrorCode.INVALID_REQUEST
        assert response.error.message == "Server not initialized"

    @pytest.mark.asyncio
    async def test_ping_allowed_before_initialize(self, handler):
        response = await handler.handle_request(JsonRpcRequest(id=1, method="ping"))
        assert response.error is None
        assert response.result == {}

    @pytest.mark.asyncio
    async def test_gate_can_be_disabled(self, router):
        handler = McpMethodHandler(router, require_initialize=False)
        response = await handler.handle_request(JsonRpcRequest(id=1, method="tools/list"))
        assert response.error is None

    @pytest.mark.asyncio
    async def test_initialized_notification(self, handler):
        for method in ("notifications/initialized", "initialized"):
            response = await handler.handle_request(JsonRpcRequest(method=method))
            assert response.error is None

    @pytest.mark.asyncio
    async def test_unknown_method(self, handler):
        response = await handler.handle_request(JsonRpcRequest(id=1, method="nope/nope"))
        assert response.error.code == JsonRpcErrorCode.METHOD_NOT_FOUND
        assert response.error.message == "Method not found: nope/nope"

    def test_supported_methods(self, handler):
        assert "tools/call" in handler.supported_methods()
        assert "logging/setLevel" in handler.supported_methods()


# ============================================================================
# Capability methods
# ============================================================================


class TestCapabilityMethods:
    """Tests for the list/call/read/get methods once initialized."""

    @pytest_asyncio.fixture
    async def ready(self, handler, initialize_params):
        await _initialize(handler, initialize_params)
        return handler

    @pytest.mark.asyncio
    async def test_tools_list(self, ready):
        response = await ready.handle_request(JsonRpcRequest(id=2, method="tools/list"))
        tools = response.result["tools"]
        assert [tool["name"] for tool in tools] == ["mock_tool1", "mock_tool2"]
        assert "inputSchema" in tools[0]
        assert "nextCursor" not in response.result

    @pytest.mark.asyncio
    async def test_tools_list_accepts_cursor(self, ready):
        response = await ready.handle_request(
            JsonRpcRequest(id=2, method="tools/list", params={"cursor": "abc"})
        )
        assert response.error is None
        assert len(response.result["tools"]) == 2

    @pytest.mark.asyncio
    async def test_tools_call(self, ready):
        response = await ready.handle_request(
            JsonRpcRequest(
                id=3,
                method="tools/call",
                params={"name": "mock_tool1", "arguments": {"input": "test"}},
            )
        )
        assert response.error is None
        assert response.result["isError"] is False
        payload = json.loads(response.result["content"][0]["text"])
        assert payload["result"] == "success"

    @pytest.mark.asyncio
    async def test_tools_call_unknown_tool_is_successful_response(self, ready):
        response = await ready.handle_request(
            JsonRpcRequest(id=3, method="tools/call", params={"name": "nope"})
        )
        assert response.error is None
        assert response.result["isError"] is True
        assert response.result["content"][0]["text"] == "Tool not found: nope"

    @pytest.mark.asyncio
    async def test_tools_call_missing_name(self, ready):
        response = await ready.handle_request(
            JsonRpcRequest(id=3, method="tools/call", params={"arguments": {}})
        )
        assert response.error.code == JsonRpcErrorCode.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_positional_params_rejected(self, ready):
        response = await ready.handle_request(
            JsonRpcRequest(id=3, method="tools/call", params=["mock_tool1"])
        )
        assert response.error.code == JsonRpcErrorCode.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_resources_list_and_read(self, ready):
        listing = await ready.handle_request(
            JsonRpcRequest(id=4, method="resources/list")
        )
        assert listing.result["resources"][0]["uri"] == "mock://readme"

        read = await ready.handle_request(
            JsonRpcRequest(id=5, method="resources/read", params={"uri": "mock://readme"})
        )
        assert read.result == {
            "contents": [
                {
                    "uri": "mock://readme",
                    "mimeType": "text/plain",
                    "text": "hello from readme",
                }
            ]
        }

    @pytest.mark.asyncio
    async def test_resources_read_miss_is_invalid_params(self, ready):
        response = await ready.handle_request(
            JsonRpcRequest(id=5, method="resources/read", params={"uri": "mock://nope"})
        )
        assert response.result is None
        assert response.error.code == JsonRpcErrorCode.INVALID_PARAMS
        assert response.error.message == "Resource not found: mock://nope"
        assert response.error.data == {"code": "NOT_FOUND"}

    @pytest.mark.asyncio
    async def test_resources_read_provider_error_is_internal(self, ready):
        response = await ready.handle_request(
            JsonRpcRequest(id=5, method="resources/read", params={"uri": "mock://broken"})
        )
        assert response.error.code == JsonRpcErrorCode.INTERNAL_ERROR
        assert response.error.data == {"code": "PROVIDER_ERROR"}

    @pytest.mark.asyncio
    async def test_prompts_list_and_get(self, ready):
        listing = await ready.handle_request(JsonRpcRequest(id=6, method="prompts/list"))
        assert listing.result["prompts"][0]["name"] == "greet"

        response = await ready.handle_request(
            JsonRpcRequest(
                id=7,
                method="prompts/get",
                params={"name": "greet", "arguments": {"name": "Ada"}},
            )
        )
        assert response.result["messages"] == [
            {"role": "user", "content": {"type": "text", "text": "Say hello to Ada"}}
        ]

    @pytest.mark.asyncio
    async def test_prompts_get_miss_is_invalid_params(self, ready):
        response = await ready.handle_request(
            JsonRpcRequest(id=7, method="prompts/get", params={"name": "missing"})
        )
        assert response.error.code == JsonRpcErrorCode.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_set_level(self, ready):
        package_logger = logging.getLogger("mcp_router")
        previous = package_logger.level
        try:
            response = await ready.handle_request(
                JsonRpcRequest(id=8, method="logging/setLevel", params={"level": "error"})
            )
            assert response.result == {}
            assert package_logger.level == logging.ERROR
        finally:
            package_logger.setLevel(previous)

    @pytest.mark.asyncio
    async def test_set_level_rejects_unknown_level(self, ready):
        response = await ready.handle_request(
            JsonRpcRequest(id=8, method="logging/setLevel", params={"level": "loud"})
        )
        assert response.error.code == JsonRpcErrorCode.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_internal_error(self, ready, tool_provider):
        tool_provider.call = AsyncMock(side_effect=RuntimeError("kaboom"))
        response = await ready.handle_request(
            JsonRpcRequest(id=9, method="tools/call", params={"name": "mock_tool1"})
        )
        assert response.error.code == JsonRpcErrorCode.INTERNAL_ERROR
        assert response.error.message == "Internal error: kaboom"


# ============================================================================
# handle_message
# ============================================================================


class TestHandleMessage:
    """Tests for the wire-level decode/dispatch/encode helper."""

    @pytest.mark.asyncio
    async def test_request_gets_serialized_response(self):
        handler = McpMethodHandler(McpRouter("s", "1"))
        raw = await handler.handle_message('{"jsonrpc": "2.0", "id": 1, "method": "ping"}')
        assert json.loads(raw) == {"jsonrpc": "2.0", "id": 1, "result": {}}

    @pytest.mark.asyncio
    async def test_notification_gets_no_response(self):
        handler = McpMethodHandler(McpRouter("s", "1"))
        raw = await handler.handle_message(
            '{"jsonrpc": "2.0", "method": "notifications/initialized"}'
        )
        assert raw is None

    @pytest.mark.asyncio
    async def test_unknown_notification_gets_no_response(self):
        handler = McpMethodHandler(McpRouter("s", "1"))
        assert await handler.handle_message('{"jsonrpc": "2.0", "method": "x"}') is None

    @pytest.mark.asyncio
    async def test_parse_error_is_answered(self):
        handler = McpMethodHandler(McpRouter("s", "1"))
        raw = await handler.handle_message("not json")
        assert json.loads(raw)["error"]["code"] == -32700

    @pytest.mark.asyncio
    async def test_full_session(self, initialize_params):
        router = McpRouter("s", "1").with_tool_provider(MockToolProvider())
        handler = McpMethodHandler(router)

        init = json.loads(
            await handler.handle_message(
                json.dumps(
                    {
                        "jsonrpc": "2.0",
                        "id": 1,
                        "method": "initialize",
                        "params": initialize_params,
                    }
                )
            )
        )
        assert init["result"]["capabilities"]["tools"] == {"listChanged": True}

        listing = json.loads(
            await handler.handle_message(
                '{"jsonrpc": "2.0", "id": 2, "method": "tools/list"}'
            )
        )
        assert len(listing["result"]["tools"]) == 2
