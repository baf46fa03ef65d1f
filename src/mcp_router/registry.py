"""Provider registry: builds a router from enabled provider categories.

Each provider category (``"web"``, ``"server"`` ...) maps to a factory
that receives the application :class:`~mcp_router.config.Config` and
returns one provider, or a list of providers.  :func:`build_router`
registers every returned provider under each role it implements.

Built-in categories register themselves at import time.  A plugin or an
embedding application can call :func:`register_provider_factory` before
:func:`build_router` to add its own integrations.

Usage::

    from mcp_router.registry import build_router

    router = build_router(get_config())

Extending with a custom category::

    from mcp_router.registry import register_provider_factory

    def search_providers(config):
        return SearchProvider(api_key=os.environ["SEARCH_API_KEY"])

    register_provider_factory("search", search_providers)
"""

import json
import logging
from typing import Any, Callable

from mcp_router.config import Config
from mcp_router.mcp.content import PromptArgument, PromptRole
from mcp_router.mcp.providers import PromptProvider, ResourceProvider, ToolProvider
from mcp_router.mcp.router import McpRouter
from mcp_router.providers.static import (
    PromptTemplate,
    StaticResourceProvider,
    TemplatePromptProvider,
)
from mcp_router.providers.web import WebFetchProvider

logger = logging.getLogger(__name__)

# Signature: (config) -> provider | list[provider]
ProviderFactory = Callable[[Config], Any]

ALL_CATEGORIES = "all"

SERVER_INFO_URI = "mcp-router://server/info"

# ---------------------------------------------------------------------------
# Registry storage
# ---------------------------------------------------------------------------

_PROVIDER_REGISTRY: dict[str, ProviderFactory] = {}
"""Maps category -> provider factory, in registration order."""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def register_provider_factory(category: str, factory: ProviderFactory) -> None:
    """Register a provider factory under ``category``.

    Registering an existing category replaces its factory.

    Raises:
        ValueError: If ``category`` is empty or the reserved ``"all"``.
    """
    if not category or category == ALL_CATEGORIES:
        raise ValueError(f"Invalid provider category: {category!r}")
    if category in _PROVIDER_REGISTRY:
        logger.debug("Replacing provider factory: %s", category)
    _PROVIDER_REGISTRY[category] = factory
    logger.debug("Registered provider factory: %s", category)


def unregister_provider_factory(category: str) -> None:
    _PROVIDER_REGISTRY.pop(category, None)


def get_available_categories() -> list[str]:
    """Return the registered provider categories in registration order."""
    return list(_PROVIDER_REGISTRY)


def resolve_categories(requested: list[str]) -> list[str]:
    """Expand ``"all"`` and validate the requested categories.

    Raises:
        ValueError: A requested category has no registered factory.
    """
    if not requested or ALL_CATEGORIES in requested:
        return get_available_categories()

    unknown = [category for category in requested if category not in _PROVIDER_REGISTRY]
    if unknown:
        raise ValueError(
            f"Unknown provider categories: {', '.join(unknown)} "
            f"(available: {', '.join(get_available_categories())})"
        )
    # Keep request order, drop duplicates
    return list(dict.fromkeys(requested))


def register_providers(router: McpRouter, providers: Any) -> int:
    """Register each provider under every role it implements.

    Returns:
        Number of role registrations performed.

    Raises:
        TypeError: A provider implements none of the three roles.
    """
    if not isinstance(providers, (list, tuple)):
        providers = [providers]

    registrations = 0
    for provider in providers:
        matched = False
        if isinstance(provider, ToolProvider):
            router.add_tool_provider(provider)
            matched = True
        if isinstance(provider, ResourceProvider):
            router.add_resource_provider(provider)
            matched = True
        if isinstance(provider, PromptProvider):
            router.add_prompt_provider(provider)
            matched = True
        if not matched:
            raise TypeError(
                f"{type(provider).__name__} implements no provider role"
            )
        registrations += 1
    return registrations


def build_router(config: Config) -> McpRouter:
    """Create a router and register the providers of the enabled categories."""
    router = McpRouter(
        config.mcp.server_name,
        config.mcp.server_version,
        config.mcp.instructions,
    )
    for category in resolve_categories(config.mcp.providers):
        providers = _PROVIDER_REGISTRY[category](config)
        count = register_providers(router, providers)
        logger.info("Provider category enabled: %s (%d providers)", category, count)

    logger.info("Router ready: %r", router)
    return router


# ---------------------------------------------------------------------------
# Built-in categories
# ---------------------------------------------------------------------------


def _web_providers(config: Config) -> WebFetchProvider:
    return WebFetchProvider(config.web_fetch)


def _server_providers(config: Config) -> list[Any]:
    resources = StaticResourceProvider("server")
    resources.add_text(
        SERVER_INFO_URI,
        "Server info",
        json.dumps(
            {
                "name": config.mcp.server_name,
                "version": config.mcp.server_version,
                "transport": config.mcp.transport,
                "providers": config.mcp.providers,
            },
            indent=2,
        ),
        description="Name, version and enabled providers of this server",
        mime_type="application/json",
    )

    prompts = TemplatePromptProvider(
        "server",
        [
            PromptTemplate(
                name="summarize_url",
                description="Fetch a web page and summarize it",
                arguments=[
                    PromptArgument(name="url", description="Page to summarize", required=True),
                    PromptArgument(name="focus", description="Aspect to focus on"),
                ],
                messages=[
                    (
                        PromptRole.USER,
                        "Use the web_fetch tool to read {url} and summarize it. {focus}",
                    ),
                ],
            ),
        ],
    )
    return [resources, prompts]


register_provider_factory("web", _web_providers)
register_provider_factory("server", _server_providers)
