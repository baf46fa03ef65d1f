"""REST convenience endpoints for calling tools without JSON-RPC.

Endpoints:
- GET /tools - List tool definitions
- POST /tools/:name - Call a tool; the body is the arguments object
- POST /call - Call a tool; the body is ``{"name": ..., "arguments": {...}}``

Call endpoints answer with ``{"success", "result", "error"}``: ``success``
mirrors ``not isError``, ``result`` is the tool result in wire form and
``error`` holds the flattened error text.  Unknown tools answer 404.
A successful ``POST /call`` is also published as a ``tool_result`` event
when an :class:`EventBroadcaster` is given.
"""

import json
import logging
from typing import TYPE_CHECKING, Any

from robyn import Response

from mcp_router.mcp import McpRouter
from mcp_router.routes.events import EventBroadcaster
from mcp_router.routes.helpers import error_response, json_response, parse_json_body

if TYPE_CHECKING:
    from robyn import Robyn

logger = logging.getLogger(__name__)


def register_tool_routes(
    app: "Robyn", router: McpRouter, events: EventBroadcaster | None = None
) -> None:
    """Register the REST tool endpoints.

    Args:
        app: The Robyn application instance.
        router: Router the calls are dispatched to.
        events: Receives ``tool_result`` events for ``POST /call``.
    """

    async def _call(name: str, arguments: Any, publish: bool = False) -> Response:
        if not isinstance(arguments, dict):
            return error_response("Tool arguments must be a JSON object", 400)

        if name not in {tool.name for tool in router.list_tools()}:
            return json_response(
                {"success": False, "result": None, "error": f"Tool not found: {name}"},
                404,
            )

        try:
            result = await router.call_tool(name, arguments)
        except Exception as call_error:
            logger.exception("Tool %s raised: %s", name, call_error)
            return json_response(
                {"success": False, "result": None, "error": str(call_error)},
                500,
            )

        if publish and events is not None and not result.is_error:
            events.publish("tool_result", {"tool": name, "result": result.to_wire()})

        return json_response(
            {
                "success": not result.is_error,
                "result": result.to_wire(),
                "error": result.render_text() if result.is_error else None,
            }
        )

    @app.get("/tools")
    async def list_tools(request) -> Response:
        return json_response(router.list_tools())

    @app.post("/tools/:name")
    async def call_tool(request) -> Response:
        """Call the tool named in the path with the body as arguments."""
        name = request.path_params.get("name", "")
        try:
            arguments = parse_json_body(request)
        except (json.JSONDecodeError, ValueError) as parse_error:
            return error_response(f"Invalid JSON body: {parse_error}", 400)
        return await _call(name, arguments)

    @app.post("/call")
    async def call_tool_by_body(request) -> Response:
        """Call a tool named in the body."""
        try:
            body = parse_json_body(request)
        except (json.JSONDecodeError, ValueError) as parse_error:
            return error_response(f"Invalid JSON body: {parse_error}", 400)

        name = body.get("name")
        if not isinstance(name, str) or not name:
            return error_response("Missing required field: name", 422)
        arguments = body.get("arguments")
        if arguments is None:
            arguments = {}
        return await _call(name, arguments, publish=True)

    logger.info("Tool routes registered: GET /tools, POST /tools/:name, POST /call")
