"""Flattened, serializable capability listings per extension."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from mcp_mate.discovery.loader import FilteredDiscoveryLoader
from mcp_mate.registry import (
    RegisteredPrompt,
    RegisteredResource,
    RegisteredResourceTemplate,
    RegisteredTool,
    Registry,
)
from mcp_mate.types import (
    Capabilities,
    CapabilityKind,
    ExtensionDescriptor,
    PromptArgumentRecord,
    PromptRecord,
    ResourceRecord,
    ResourceTemplateRecord,
    ToolRecord,
)


class CapabilityCollector:
    """Collects the capabilities of one extension at a time.

    Each call builds its own registry, so nothing carries over between calls.
    """

    def __init__(self, loader: FilteredDiscoveryLoader) -> None:
        self._loader = loader

    def collect_capabilities(self, identifier: str, descriptor: ExtensionDescriptor) -> Capabilities:
        registry = Registry()
        self._loader.with_extensions({identifier: descriptor}).load(registry)

        capabilities = Capabilities()
        for entry in cast("list[RegisteredTool]", registry.entries(CapabilityKind.TOOL)):
            capabilities.tools[entry.key] = ToolRecord(
                name=entry.tool.name,
                description=entry.tool.description,
                handler=entry.handler_ref,
                input_schema=entry.tool.inputSchema,
                extension=identifier,
            )

        for entry in cast("list[RegisteredResource]", registry.entries(CapabilityKind.RESOURCE)):
            capabilities.resources[entry.key] = ResourceRecord(
                uri=entry.uri,
                name=entry.resource.name,
                description=entry.resource.description,
                handler=entry.handler_ref,
                mime_type=entry.resource.mimeType,
                extension=identifier,
            )

        for entry in cast("list[RegisteredPrompt]", registry.entries(CapabilityKind.PROMPT)):
            capabilities.prompts[entry.key] = PromptRecord(
                name=entry.prompt.name,
                description=entry.prompt.description,
                handler=entry.handler_ref,
                arguments=[
                    PromptArgumentRecord(
                        name=arg.name,
                        description=arg.description,
                        required=bool(arg.required),
                    )
                    for arg in entry.prompt.arguments or []
                ],
                extension=identifier,
            )

        templates = registry.entries(CapabilityKind.RESOURCE_TEMPLATE)
        for entry in cast("list[RegisteredResourceTemplate]", templates):
            capabilities.resource_templates[entry.key] = ResourceTemplateRecord(
                uri_template=entry.template.uriTemplate,
                name=entry.template.name,
                description=entry.template.description,
                handler=entry.handler_ref,
                mime_type=entry.template.mimeType,
                extension=identifier,
            )

        return capabilities

    def collect_all(self, extensions: Mapping[str, ExtensionDescriptor]) -> Capabilities:
        """Merge every extension's capabilities in order; later keys win."""
        aggregate = Capabilities()
        for identifier, descriptor in extensions.items():
            aggregate = aggregate.merge(self.collect_capabilities(identifier, descriptor))
        return aggregate
