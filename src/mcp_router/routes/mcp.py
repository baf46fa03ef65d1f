"""MCP Protocol route handlers.

Implements the MCP HTTP endpoints in the style of the Streamable HTTP
Transport: every JSON-RPC message is one POST, answered with one JSON
body.  Server-to-client streaming is not offered.

Endpoints:
- POST /mcp/ - JSON-RPC 2.0 message handler
- GET /mcp/ - Returns 405 (streaming not supported)
- DELETE /mcp/ - Returns 404 (no session to terminate)
"""

import json
import logging
from typing import TYPE_CHECKING

from robyn import Response

from mcp_router.mcp import (
    InvalidMessageError,
    JsonRpcErrorCode,
    McpMethodHandler,
    create_error_response,
    decode_request,
)
from mcp_router.routes.helpers import JSON_HEADERS

if TYPE_CHECKING:
    from robyn import Robyn

logger = logging.getLogger(__name__)


def register_mcp_routes(app: "Robyn", handler: McpMethodHandler) -> None:
    """Register MCP protocol routes on the Robyn application.

    Args:
        app: The Robyn application instance.
        handler: Method handler that owns the protocol session.
    """

    @app.post("/mcp/")
    async def post_mcp(request) -> Response:
        """Handle MCP JSON-RPC 2.0 messages.

        Returns:
            - 200: JSON-RPC response (including JSON-RPC errors)
            - 202: Notification accepted (no content)
            - 400: Invalid JSON or message format
            - 500: Internal server error
        """
        try:
            rpc_request = decode_request(request.body or "")
        except InvalidMessageError as invalid:
            return Response(
                400, dict(JSON_HEADERS), json.dumps(invalid.response.to_wire())
            )

        try:
            response = await handler.handle_request(rpc_request)
        except Exception as handler_error:
            logger.exception("MCP handler error: %s", handler_error)
            error = create_error_response(
                rpc_request.id,
                JsonRpcErrorCode.INTERNAL_ERROR,
                f"Internal error: {handler_error}",
            )
            return Response(500, dict(JSON_HEADERS), json.dumps(error.to_wire()))

        # Notifications don't get responses
        if rpc_request.is_notification:
            return Response(202, dict(JSON_HEADERS), "")

        return Response(200, dict(JSON_HEADERS), json.dumps(response.to_wire()))

    @app.get("/mcp/")
    async def get_mcp(request) -> Response:
        """MCP GET endpoint - streaming is not supported."""
        return Response(
            405,
            {**JSON_HEADERS, "Allow": "POST, DELETE"},
            json.dumps({"error": "GET method not allowed; streaming not supported"}),
        )

    @app.delete("/mcp/")
    async def delete_mcp(request) -> Response:
        """MCP DELETE endpoint - there is no HTTP session to terminate."""
        return Response(
            404,
            dict(JSON_HEADERS),
            json.dumps({"error": "Session not found (server is stateless)"}),
        )

    logger.info("MCP routes registered: POST/GET/DELETE /mcp/")
