"""In-memory resource and prompt providers.

Useful for exposing fixed documents (READMEs, schemas, server metadata)
and canned prompt templates without writing a provider class.

Usage::

    resources = StaticResourceProvider("docs")
    resources.add_text("docs://readme", "README", "# Hello", mime_type="text/markdown")

    prompts = TemplatePromptProvider("prompts")
    prompts.add_template(
        PromptTemplate(
            name="summarize",
            description="Summarize a document",
            arguments=[PromptArgument(name="text", required=True)],
            messages=[(PromptRole.USER, "Summarize this:\\n\\n{text}")],
        )
    )
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from mcp_router.mcp.content import (
    PromptArgument,
    PromptContent,
    PromptDefinition,
    PromptMessage,
    PromptRole,
    PromptTextContent,
    ResourceContent,
    ResourceDefinition,
)
from mcp_router.mcp.errors import (
    InvalidParameterError,
    MissingParameterError,
    PromptNotFoundError,
    ResourceNotFoundError,
)
from mcp_router.mcp.providers import PromptProvider, ResourceProvider

logger = logging.getLogger(__name__)


# ============================================================================
# Resources
# ============================================================================


class StaticResourceProvider(ResourceProvider):
    """Serves resources from an in-memory ``uri -> contents`` map.

    Resources are declared in insertion order.  Re-adding a uri replaces
    both its definition and its contents.
    """

    def __init__(self, name: str = "static") -> None:
        self._name = name
        self._definitions: dict[str, ResourceDefinition] = {}
        self._contents: dict[str, ResourceContent] = {}

    def name(self) -> str:
        return self._name

    def add(self, definition: ResourceDefinition, content: ResourceContent) -> None:
        if definition.uri != content.uri:
            raise ValueError(
                f"Content uri {content.uri!r} does not match definition uri "
                f"{definition.uri!r}"
            )
        self._definitions[definition.uri] = definition
        self._contents[definition.uri] = content

    def add_text(
        self,
        uri: str,
        name: str,
        text: str,
        *,
        description: str | None = None,
        mime_type: str | None = "text/plain",
    ) -> None:
        self.add(
            ResourceDefinition(
                uri=uri, name=name, description=description, mime_type=mime_type
            ),
            ResourceContent.from_text(uri, text, mime_type),
        )

    def add_blob(
        self,
        uri: str,
        name: str,
        data: bytes,
        *,
        description: str | None = None,
        mime_type: str | None = "application/octet-stream",
    ) -> None:
        self.add(
            ResourceDefinition(
                uri=uri, name=name, description=description, mime_type=mime_type
            ),
            ResourceContent.from_blob(uri, data, mime_type),
        )

    def resources(self) -> list[ResourceDefinition]:
        return list(self._definitions.values())

    async def read(self, uri: str) -> ResourceContent:
        content = self._contents.get(uri)
        if content is None:
            raise ResourceNotFoundError(uri)
        return content


# ============================================================================
# Prompts
# ============================================================================


@dataclass
class PromptTemplate:
    """A prompt whose messages are ``str.format`` templates.

    Attributes:
        name: Prompt name (routing key).
        description: Optional human-readable description.
        arguments: Declared arguments; required ones must be supplied.
        messages: ``(role, template)`` pairs rendered in order.
    """

    name: str
    messages: list[tuple[PromptRole, str]]
    description: str | None = None
    arguments: list[PromptArgument] = field(default_factory=list)

    def definition(self) -> PromptDefinition:
        return PromptDefinition(
            name=self.name,
            description=self.description,
            arguments=self.arguments or None,
        )

    def render(self, arguments: dict[str, Any]) -> PromptContent:
        """Render every message with ``arguments``.

        Optional arguments that were not supplied render as empty strings.

        Raises:
            MissingParameterError: A required argument is absent.
            InvalidParameterError: A template references an undeclared name.
        """
        for argument in self.arguments:
            if argument.required and arguments.get(argument.name) is None:
                raise MissingParameterError(argument.name)

        values = {argument.name: "" for argument in self.arguments}
        values.update({key: value for key, value in arguments.items() if value is not None})

        messages = []
        for role, template in self.messages:
            try:
                text = template.format_map(values)
            except (KeyError, IndexError) as exc:
                raise InvalidParameterError(
                    f"Prompt '{self.name}' references unknown argument: {exc}"
                ) from exc
            messages.append(PromptMessage(role=role, content=PromptTextContent(text=text)))

        return PromptContent(description=self.description, messages=messages)


class TemplatePromptProvider(PromptProvider):
    """Serves prompts rendered from :class:`PromptTemplate` objects."""

    def __init__(
        self, name: str = "templates", templates: list[PromptTemplate] | None = None
    ) -> None:
        self._name = name
        self._templates: dict[str, PromptTemplate] = {}
        for template in templates or []:
            self.add_template(template)

    def name(self) -> str:
        return self._name

    def add_template(self, template: PromptTemplate) -> None:
        self._templates[template.name] = template
        logger.debug("Prompt template registered: %s/%s", self._name, template.name)

    def prompts(self) -> list[PromptDefinition]:
        return [template.definition() for template in self._templates.values()]

    async def get(self, name: str, arguments: dict[str, Any]) -> PromptContent:
        template = self._templates.get(name)
        if template is None:
            raise PromptNotFoundError(name)
        return template.render(arguments)
