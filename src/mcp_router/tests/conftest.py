"""Pytest configuration for MCP router tests.

Usage::

    pytest src/mcp_router/tests
    pytest -m "not network"
"""

import os
from unittest.mock import patch

import pytest

from mcp_router.config import reset_config
from mcp_router.mcp import McpMethodHandler, McpRouter
from mcp_router.tests.conftest_providers import (
    MockPromptProvider,
    MockResourceProvider,
    MockToolProvider,
)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "network: marks tests that reach real HTTP endpoints",
    )


@pytest.fixture
def anyio_backend():
    """Configure anyio to use asyncio backend only."""
    return "asyncio"


@pytest.fixture
def clean_env():
    """Run with every MCP_* / WEB_FETCH_* variable removed and a fresh config."""
    stripped = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith(("MCP_", "WEB_FETCH_"))
    }
    with patch.dict(os.environ, stripped, clear=True):
        reset_config()
        yield
    reset_config()


@pytest.fixture
def tool_provider() -> MockToolProvider:
    return MockToolProvider()


@pytest.fixture
def router(tool_provider: MockToolProvider) -> McpRouter:
    """Router with one provider of each role."""
    return (
        McpRouter("test-server", "1.0.0")
        .with_tool_provider(tool_provider)
        .with_resource_provider(MockResourceProvider())
        .with_prompt_provider(MockPromptProvider())
    )


@pytest.fixture
def handler(router: McpRouter) -> McpMethodHandler:
    return McpMethodHandler(router)


@pytest.fixture
def initialize_params() -> dict:
    return {
        "protocolVersion": "2024-11-05",
        "capabilities": {},
        "clientInfo": {"name": "test-client", "version": "0.1.0"},
    }
