"""Providers bundled with the router.

- :class:`WebFetchProvider` -- ``web_fetch`` tool backed by httpx
- :class:`StaticResourceProvider` -- in-memory resources
- :class:`TemplatePromptProvider` -- ``str.format`` prompt templates
"""

from mcp_router.providers.static import (
    PromptTemplate,
    StaticResourceProvider,
    TemplatePromptProvider,
)
from mcp_router.providers.web import WebFetchProvider

__all__ = [
    "PromptTemplate",
    "StaticResourceProvider",
    "TemplatePromptProvider",
    "WebFetchProvider",
]
