"""Robyn route registration for the MCP router HTTP transport."""

from mcp_router.routes.events import EventBroadcaster, register_event_routes
from mcp_router.routes.mcp import register_mcp_routes
from mcp_router.routes.tools import register_tool_routes

__all__ = [
    "EventBroadcaster",
    "register_event_routes",
    "register_mcp_routes",
    "register_tool_routes",
]
