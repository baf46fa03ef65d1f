"""``web_fetch`` tool provider.

Fetches a URL with :mod:`httpx` and returns the HTTP status and body as
text.  Every failure (missing or blocked url, timeout, unreachable host,
oversized body ...) is reported as an ``is_error`` tool result so the
calling model can see it; non-2xx statuses are not failures and are
returned like any other page.

Only public http(s) hosts are fetched (see :mod:`.url_guard`), redirects
are reported rather than followed, and bodies larger than
``max_response_bytes`` are refused.

Usage::

    provider = WebFetchProvider(WebFetchConfig(max_chars=5000))
    result = await provider.call("web_fetch", {"url": "https://example.com"})
"""

import logging
from typing import Any

import httpx

from mcp_router.config import WebFetchConfig
from mcp_router.mcp.content import ToolDefinition, ToolResult
from mcp_router.mcp.providers import ToolProvider
from mcp_router.providers.url_guard import (
    BlockedUrlError,
    Resolver,
    resolve_host,
    validate_fetch_url,
)

logger = logging.getLogger(__name__)

WEB_FETCH_TOOL = "web_fetch"

_WEB_FETCH_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "url": {
            "type": "string",
            "description": "The URL to fetch",
        },
    },
    "required": ["url"],
}


class ResponseTooLargeError(Exception):
    """Raised when a body exceeds ``max_response_bytes``."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Response too large: {size} bytes (max {limit} bytes)")
        self.size = size
        self.limit = limit


class WebFetchProvider(ToolProvider):
    """Tool provider exposing ``web_fetch``.

    Args:
        config: Timeout, size, host policy and User-Agent settings.
        client: Optional pre-built ``httpx.AsyncClient``.  When omitted a
            short-lived client is created per call.
        resolver: Host name resolver used by the private-address check.
    """

    def __init__(
        self,
        config: WebFetchConfig | None = None,
        client: httpx.AsyncClient | None = None,
        resolver: Resolver = resolve_host,
    ) -> None:
        self.config = config or WebFetchConfig()
        self._client = client
        self._resolver = resolver

    def name(self) -> str:
        return "web"

    def description(self) -> str:
        return "Fetch web pages over HTTP"

    def tools(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(name=WEB_FETCH_TOOL)
            .with_description("Fetch content from a URL")
            .with_schema(_WEB_FETCH_SCHEMA)
        ]

    async def call(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        if name != WEB_FETCH_TOOL:
            return ToolResult.error(f"Tool not found: {name}")

        url = arguments.get("url")
        if not isinstance(url, str) or not url:
            return ToolResult.error("Missing required parameter: url")

        try:
            target = await validate_fetch_url(
                url,
                resolver=self._resolver,
                allow_private=self.config.allow_private_hosts,
            )
        except BlockedUrlError as exc:
            logger.warning("web_fetch refused: url=%s reason=%s", url, exc)
            return ToolResult.error(str(exc))

        try:
            return ToolResult.text(await self._fetch(target))
        except ResponseTooLargeError as exc:
            logger.warning("web_fetch: url=%s %s", url, exc)
            return ToolResult.error(str(exc))
        except httpx.TimeoutException:
            message = f"Request timed out after {self.config.timeout}s: url={url}"
            logger.error(message)
            return ToolResult.error(message)
        except httpx.ConnectError as exc:
            message = f"Host unreachable: url={url} error={exc}"
            logger.error(message)
            return ToolResult.error(message)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            message = f"HTTP error: url={url} error={exc}"
            logger.error(message)
            return ToolResult.error(message)

    async def _fetch(self, url: httpx.URL) -> str:
        if self._client is not None:
            return await self._fetch_with(self._client, url)
        async with httpx.AsyncClient(
            timeout=self.config.timeout, follow_redirects=False
        ) as client:
            return await self._fetch_with(client, url)

    async def _fetch_with(self, client: httpx.AsyncClient, url: httpx.URL) -> str:
        headers = {"User-Agent": self.config.user_agent}
        async with client.stream(
            "GET",
            url,
            headers=headers,
            timeout=self.config.timeout,
            follow_redirects=False,
        ) as response:
            if 300 <= response.status_code < 400:
                return self._render_redirect(response)
            body = await self._read_body(response)
        return self._render(response, body)

    async def _read_body(self, response: httpx.Response) -> bytes:
        limit = self.config.max_response_bytes
        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > limit:
            raise ResponseTooLargeError(int(declared), limit)

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > limit:
                raise ResponseTooLargeError(len(body), limit)
        return bytes(body)

    @staticmethod
    def _status(response: httpx.Response) -> str:
        return f"{response.status_code} {response.reason_phrase}".strip()

    def _render_redirect(self, response: httpx.Response) -> str:
        status = self._status(response)
        location = response.headers.get("location")
        logger.debug("web_fetch: url=%s redirect=%s", response.request.url, location)
        if location:
            return (
                f"Status: {status} (Redirect)\n"
                f"Redirects are disabled for security. Location header: {location}"
            )
        return f"Status: {status} (Redirect)\nRedirects are disabled for security."

    def _render(self, response: httpx.Response, body: bytes) -> str:
        status = self._status(response)
        text = body.decode(response.encoding or "utf-8", errors="replace")
        logger.debug(
            "web_fetch: url=%s status=%s bytes=%d",
            response.request.url,
            status,
            len(body),
        )
        if len(text) > self.config.max_chars:
            return (
                f"Status: {status}\nContent (truncated):\n"
                f"{text[: self.config.max_chars]}"
            )
        return f"Status: {status}\nContent:\n{text}"
