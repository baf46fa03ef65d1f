"""Server-Sent Events stream of router activity.

Endpoints:
- GET /sse - Event stream
- GET /events - Alias of /sse

Every subscriber first receives a ``connected`` event, then each event
published on the :class:`EventBroadcaster` (``tool_result`` after a
successful ``POST /call``).  A comment line is sent when the stream has
been idle for ``keepalive`` seconds.
"""

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, AsyncGenerator

from robyn.responses import SSEResponse
from robyn.robyn import Headers

if TYPE_CHECKING:
    from robyn import Robyn

logger = logging.getLogger(__name__)

KEEPALIVE_SECONDS = 30.0
SUBSCRIBER_QUEUE_SIZE = 100


def sse_headers() -> Headers:
    """Create headers for an event stream response."""
    headers = Headers({})
    headers.set("Content-Type", "text/event-stream; charset=utf-8")
    headers.set("Cache-Control", "no-store")
    headers.set("X-Accel-Buffering", "no")
    headers.set("Access-Control-Allow-Origin", "*")
    return headers


def format_sse_event(event_type: str, data: Any) -> str:
    """Format data as an SSE event.

    ```
    event: <event_type>
    data: <payload>

    ```

    Strings are sent as-is, anything else as compact JSON.
    """
    if isinstance(data, str):
        payload = data
    else:
        payload = json.dumps(data, separators=(",", ":"))
    return f"event: {event_type}\ndata: {payload}\n\n"


class EventBroadcaster:
    """Fan-out of events to every connected stream.

    Each subscriber owns a bounded queue; when a slow subscriber's queue is
    full, new events are dropped for that subscriber only.
    """

    def __init__(self, queue_size: int = SUBSCRIBER_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._subscribers: set[asyncio.Queue[tuple[str, Any]]] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[tuple[str, Any]]:
        queue: asyncio.Queue[tuple[str, Any]] = asyncio.Queue(self._queue_size)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[tuple[str, Any]]) -> None:
        self._subscribers.discard(queue)

    def publish(self, event_type: str, data: Any) -> int:
        """Queue an event for every subscriber.

        Returns:
            Number of subscribers the event was delivered to.
        """
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait((event_type, data))
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("SSE subscriber lagging, dropped %s event", event_type)
        return delivered


async def event_stream(
    broadcaster: EventBroadcaster, keepalive: float = KEEPALIVE_SECONDS
) -> AsyncGenerator[str, None]:
    """Yield SSE frames for one subscriber until the client goes away."""
    queue = broadcaster.subscribe()
    logger.debug("SSE subscriber connected (%d total)", broadcaster.subscriber_count)
    try:
        yield format_sse_event("connected", "Connected to MCP SSE server")
        while True:
            try:
                event_type, data = await asyncio.wait_for(queue.get(), keepalive)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield format_sse_event(event_type, data)
    finally:
        broadcaster.unsubscribe(queue)
        logger.debug("SSE subscriber disconnected")


def register_event_routes(app: "Robyn", broadcaster: EventBroadcaster) -> None:
    """Register the SSE endpoints.

    Args:
        app: The Robyn application instance.
        broadcaster: Source of the streamed events.
    """

    def _stream_response():
        return SSEResponse(
            content=event_stream(broadcaster),
            status_code=200,
            headers=sse_headers(),
        )

    @app.get("/sse")
    async def get_sse(request):
        return _stream_response()

    @app.get("/events")
    async def get_events(request):
        return _stream_response()

    logger.info("Event routes registered: GET /sse, GET /events")
