"""Tests for the in-memory resource and template prompt providers."""

import base64

import pytest

from mcp_router.mcp import (
    InvalidParameterError,
    McpRouter,
    MissingParameterError,
    PromptArgument,
    PromptNotFoundError,
    PromptRole,
    ResourceContent,
    ResourceDefinition,
    ResourceNotFoundError,
)
from mcp_router.providers import (
    PromptTemplate,
    StaticResourceProvider,
    TemplatePromptProvider,
)


@pytest.fixture
def resources() -> StaticResourceProvider:
    provider = StaticResourceProvider("docs")
    provider.add_text(
        "docs://readme", "README", "# Hello", mime_type="text/markdown"
    )
    provider.add_blob("docs://logo", "Logo", b"\x89PNG", mime_type="image/png")
    return provider


@pytest.fixture
def prompts() -> TemplatePromptProvider:
    return TemplatePromptProvider(
        "prompts",
        [
            PromptTemplate(
                name="review",
                description="Review code",
                arguments=[
                    PromptArgument(name="language", required=True),
                    PromptArgument(name="style"),
                ],
                messages=[
                    (PromptRole.USER, "Review this {language} code. {style}"),
                    (PromptRole.ASSISTANT, "Reviewing {language}."),
                ],
            )
        ],
    )


class TestStaticResourceProvider:
    """Tests for StaticResourceProvider."""

    def test_declares_in_insertion_order(self, resources):
        assert resources.name() == "docs"
        assert [r.uri for r in resources.resources()] == ["docs://readme", "docs://logo"]
        assert resources.resources()[0].mime_type == "text/markdown"

    @pytest.mark.asyncio
    async def test_read_text(self, resources):
        content = await resources.read("docs://readme")
        assert content.text == "# Hello"
        assert content.blob is None

    @pytest.mark.asyncio
    async def test_read_blob(self, resources):
        content = await resources.read("docs://logo")
        assert base64.b64decode(content.blob) == b"\x89PNG"

    @pytest.mark.asyncio
    async def test_read_unknown(self, resources):
        with pytest.raises(ResourceNotFoundError):
            await resources.read("docs://nope")

    def test_readding_replaces(self, resources):
        resources.add_text("docs://readme", "README v2", "# Bye")
        assert len(resources.resources()) == 2
        assert resources.resources()[0].name == "README v2"

    def test_add_rejects_mismatched_uri(self):
        provider = StaticResourceProvider()
        with pytest.raises(ValueError, match="does not match"):
            provider.add(
                ResourceDefinition(uri="a://1", name="one"),
                ResourceContent.from_text("a://2", "two"),
            )


class TestTemplatePromptProvider:
    """Tests for TemplatePromptProvider."""

    def test_declares_arguments(self, prompts):
        definition = prompts.prompts()[0]
        assert definition.name == "review"
        assert [(a.name, a.required) for a in definition.arguments] == [
            ("language", True),
            ("style", False),
        ]

    def test_template_without_arguments_declares_none(self):
        provider = TemplatePromptProvider(
            templates=[PromptTemplate(name="hi", messages=[(PromptRole.USER, "hi")])]
        )
        assert provider.prompts()[0].arguments is None

    @pytest.mark.asyncio
    async def test_render(self, prompts):
        content = await prompts.get("review", {"language": "Python", "style": "Be terse."})

        assert content.description == "Review code"
        assert [m.role for m in content.messages] == [PromptRole.USER, PromptRole.ASSISTANT]
        assert content.messages[0].content.text == "Review this Python code. Be terse."
        assert content.messages[1].content.text == "Reviewing Python."

    @pytest.mark.asyncio
    async def test_optional_argument_renders_empty(self, prompts):
        content = await prompts.get("review", {"language": "Rust"})
        assert content.messages[0].content.text == "Review this Rust code. "

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, prompts):
        with pytest.raises(MissingParameterError) as exc_info:
            await prompts.get("review", {})
        assert exc_info.value.parameter == "language"
        assert exc_info.value.code == "MISSING_PARAMETER"

    @pytest.mark.asyncio
    async def test_undeclared_placeholder(self):
        provider = TemplatePromptProvider(
            templates=[
                PromptTemplate(name="broken", messages=[(PromptRole.USER, "{oops}")])
            ]
        )
        with pytest.raises(InvalidParameterError, match="unknown argument"):
            await provider.get("broken", {})

    @pytest.mark.asyncio
    async def test_unknown_prompt(self, prompts):
        with pytest.raises(PromptNotFoundError):
            await prompts.get("nope", {})

    @pytest.mark.asyncio
    async def test_routed_through_router(self, prompts, resources):
        router = (
            McpRouter("s", "1")
            .with_prompt_provider(prompts)
            .with_resource_provider(resources)
        )
        content = await router.get_prompt("review", {"language": "Go"})
        assert content.messages[1].content.text == "Reviewing Go."
        assert (await router.read_resource("docs://readme")).text == "# Hello"
