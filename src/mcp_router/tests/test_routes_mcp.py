"""Tests for the POST/GET/DELETE /mcp/ route handlers."""

import json
from unittest.mock import AsyncMock

import pytest

from mcp_router.routes.mcp import register_mcp_routes
from mcp_router.tests.conftest_routes import MockRequest, RouteCapture, response_json


@pytest.fixture
def capture(handler) -> RouteCapture:
    capture = RouteCapture()
    register_mcp_routes(capture, handler)
    return capture


def _rpc(**fields) -> MockRequest:
    return MockRequest(
        body={"jsonrpc": "2.0", **fields},
        headers={"accept": "application/json, text/event-stream"},
        method="POST",
        url="/mcp/",
    )


class TestRegistration:
    def test_routes_registered(self, capture):
        assert sorted(capture.list_routes()) == [
            ("DELETE", "/mcp/"),
            ("GET", "/mcp/"),
            ("POST", "/mcp/"),
        ]


class TestPostMcp:
    """Tests for the JSON-RPC POST endpoint."""

    @pytest.mark.asyncio
    async def test_initialize_then_list(self, capture, initialize_params):
        post = capture.get_handler("POST", "/mcp/")

        init = await post(_rpc(id=1, method="initialize", params=initialize_params))
        assert init.status_code == 200
        assert response_json(init)["result"]["protocolVersion"] == "2024-11-05"

        listing = await post(_rpc(id=2, method="tools/list"))
        assert listing.status_code == 200
        assert len(response_json(listing)["result"]["tools"]) == 2

    @pytest.mark.asyncio
    async def test_notification_is_accepted_without_body(self, capture):
        post = capture.get_handler("POST", "/mcp/")
        response = await post(_rpc(method="notifications/initialized"))
        assert response.status_code == 202
        assert response.description in ("", b"")

    @pytest.mark.asyncio
    async def test_rpc_errors_use_status_200(self, capture):
        post = capture.get_handler("POST", "/mcp/")
        response = await post(_rpc(id=3, method="tools/list"))
        assert response.status_code == 200
        assert response_json(response)["error"]["message"] == "Server not initialized"

    @pytest.mark.asyncio
    async def test_invalid_json(self, capture):
        post = capture.get_handler("POST", "/mcp/")
        response = await post(MockRequest(body="{oops", method="POST"))
        assert response.status_code == 400
        assert response_json(response)["error"]["code"] == -32700

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_parse_error(self, capture):
        post = capture.get_handler("POST", "/mcp/")
        response = await post(
            MockRequest(body=b'{"jsonrpc":"2.0","id":1,"method":"ping\xff"}', method="POST")
        )
        assert response.status_code == 400
        body = response_json(response)
        assert body["id"] is None
        assert body["error"]["code"] == -32700

    @pytest.mark.asyncio
    async def test_accept_header_is_not_required(self, capture):
        post = capture.get_handler("POST", "/mcp/")
        response = await post(
            MockRequest(
                body={"jsonrpc": "2.0", "id": 5, "method": "ping"},
                headers={"accept": "text/html"},
                method="POST",
            )
        )
        assert response.status_code == 200
        assert response_json(response)["result"] == {}

    @pytest.mark.asyncio
    async def test_non_object_body(self, capture):
        post = capture.get_handler("POST", "/mcp/")
        response = await post(MockRequest(body=[1, 2], method="POST"))
        assert response.status_code == 400
        assert response_json(response)["error"]["code"] == -32600

    @pytest.mark.asyncio
    async def test_missing_method(self, capture):
        post = capture.get_handler("POST", "/mcp/")
        response = await post(MockRequest(body={"jsonrpc": "2.0", "id": 9}, method="POST"))
        assert response.status_code == 400
        body = response_json(response)
        assert body["id"] == 9
        assert body["error"]["code"] == -32600

    @pytest.mark.asyncio
    async def test_handler_crash_is_500(self, handler):
        handler.handle_request = AsyncMock(side_effect=RuntimeError("boom"))
        capture = RouteCapture()
        register_mcp_routes(capture, handler)

        response = await capture.get_handler("POST", "/mcp/")(_rpc(id=4, method="ping"))

        assert response.status_code == 500
        body = response_json(response)
        assert body["id"] == 4
        assert body["error"] == {"code": -32603, "message": "Internal error: boom"}


class TestOtherMethods:
    """Tests for the unsupported GET/DELETE verbs."""

    @pytest.mark.asyncio
    async def test_get_is_405(self, capture):
        response = await capture.get_handler("GET", "/mcp/")(MockRequest())
        assert response.status_code == 405
        assert response.headers["Allow"] == "POST, DELETE"

    @pytest.mark.asyncio
    async def test_delete_is_404(self, capture):
        response = await capture.get_handler("DELETE", "/mcp/")(MockRequest())
        assert response.status_code == 404
        assert "stateless" in json.dumps(response_json(response))
