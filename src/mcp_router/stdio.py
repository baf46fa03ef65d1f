"""stdio transport.

One JSON-RPC message per line on stdin, one response per line on stdout.
Messages are processed sequentially until EOF; notifications produce no
output.  Logging must go to stderr so stdout carries protocol frames only.
"""

import asyncio
import logging
import sys
from typing import AsyncIterable, AsyncIterator, Callable

from mcp_router.mcp import McpMethodHandler

logger = logging.getLogger(__name__)


async def read_stdin_lines() -> AsyncIterator[str]:
    """Yield stdin lines without blocking the event loop."""
    while True:
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line:
            return
        yield line


def write_stdout(frame: str) -> None:
    sys.stdout.write(frame + "\n")
    sys.stdout.flush()


async def serve_lines(
    handler: McpMethodHandler,
    lines: AsyncIterable[str],
    write: Callable[[str], None],
) -> int:
    """Answer every message in ``lines`` through ``write``.

    Blank lines are skipped.

    Returns:
        Number of messages processed.
    """
    processed = 0
    async for line in lines:
        message = line.strip()
        if not message:
            continue
        processed += 1
        response = await handler.handle_message(message)
        if response is not None:
            write(response)
    return processed


async def run_stdio(handler: McpMethodHandler) -> None:
    """Serve ``handler`` over stdin/stdout until stdin is closed."""
    logger.info("MCP stdio transport started")
    processed = await serve_lines(handler, read_stdin_lines(), write_stdout)
    logger.info("MCP stdio transport stopped after %d messages", processed)
