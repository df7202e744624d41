"""Type definitions for MCP Mate using Pydantic."""

from __future__ import annotations

import posixpath
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from mcp_mate.errors import InvalidKindError

# Reserved identifier of the root project pseudo-extension
ROOT_EXTENSION = "_custom"


# === Extension Types ===


def _string_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ValueError(f'"{field_name}" must be a string or a list of strings')


def _prefixed(base: str, path: str) -> str:
    if not base:
        return path
    return posixpath.normpath(f"{base.rstrip('/')}/{path.lstrip('/')}")


class ExtensionDescriptor(BaseModel):
    """One source of capabilities: a dependency package or the root project."""

    identifier: str
    scan_dirs: list[str] = Field(default_factory=list)
    includes: list[str] = Field(default_factory=list)
    instructions: str | None = None

    @classmethod
    def from_config_block(
        cls, identifier: str, block: dict[str, Any], base: str = ""
    ) -> ExtensionDescriptor:
        """Build a descriptor from a raw ``extra.mate`` block.

        Every path is prefixed with ``base`` (the package install path,
        relative to the project root). Raises ValueError for blocks whose
        fields have the wrong shape.
        """
        instructions = block.get("instructions")
        if instructions is not None and not isinstance(instructions, str):
            raise ValueError('"instructions" must be a string')

        return cls(
            identifier=identifier,
            scan_dirs=[_prefixed(base, d) for d in _string_list(block.get("scan-dirs"), "scan-dirs")],
            includes=[_prefixed(base, f) for f in _string_list(block.get("includes"), "includes")],
            instructions=_prefixed(base, instructions) if instructions else None,
        )

    @property
    def is_root(self) -> bool:
        return self.identifier == ROOT_EXTENSION


# === Policy Types ===


class CapabilityKind(str, Enum):
    """The four kinds of MCP capabilities."""

    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"
    RESOURCE_TEMPLATE = "resource_template"

    @property
    def attribute(self) -> str:
        """Name of the matching Capabilities field."""
        return f"{self.value}s"

    @classmethod
    def parse(cls, value: str | CapabilityKind) -> CapabilityKind:
        if isinstance(value, CapabilityKind):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise InvalidKindError(f'Invalid type "{value}". Valid types: {valid}') from None


class EnablementPolicy(BaseModel):
    """Which extensions are active and which of their capabilities are disabled.

    ``disabled_features`` maps an extension identifier to keys that are either
    a capability kind (``tool``, ``resource``...) or the natural key of a
    single capability, each mapped to ``True`` when disabled.
    """

    enabled_extensions: list[str] = Field(default_factory=list)
    disabled_features: dict[str, dict[str, bool]] = Field(default_factory=dict)

    def is_kind_disabled(self, extension: str, kind: CapabilityKind) -> bool:
        return self.disabled_features.get(extension, {}).get(kind.value, False)

    def is_capability_disabled(self, extension: str, kind: CapabilityKind, key: str) -> bool:
        if self.is_kind_disabled(extension, kind):
            return True
        return self.disabled_features.get(extension, {}).get(key, False)

    def all_kinds_disabled(self, extension: str) -> bool:
        return all(self.is_kind_disabled(extension, kind) for kind in CapabilityKind)


# === Capability Record Types ===


class CapabilityRecord(BaseModel):
    """Flat, serializable view of one discovered capability."""

    kind: ClassVar[CapabilityKind]

    @property
    def key(self) -> str:
        raise NotImplementedError

    @property
    def extension_name(self) -> str:
        return getattr(self, "extension")


class ToolRecord(CapabilityRecord):
    """A callable tool."""

    kind: ClassVar[CapabilityKind] = CapabilityKind.TOOL

    name: str
    description: str | None = None
    handler: str
    input_schema: dict[str, Any] | None = None
    extension: str

    @property
    def key(self) -> str:
        return self.name


class ResourceRecord(CapabilityRecord):
    """A readable resource."""

    kind: ClassVar[CapabilityKind] = CapabilityKind.RESOURCE

    uri: str
    name: str
    description: str | None = None
    handler: str
    mime_type: str | None = None
    extension: str

    @property
    def key(self) -> str:
        return self.uri


class PromptArgumentRecord(BaseModel):
    """Argument accepted by a prompt template."""

    name: str
    description: str | None = None
    required: bool = False


class PromptRecord(CapabilityRecord):
    """A prompt template."""

    kind: ClassVar[CapabilityKind] = CapabilityKind.PROMPT

    name: str
    description: str | None = None
    handler: str
    arguments: list[PromptArgumentRecord] = Field(default_factory=list)
    extension: str

    @property
    def key(self) -> str:
        return self.name


class ResourceTemplateRecord(CapabilityRecord):
    """A parametric resource."""

    kind: ClassVar[CapabilityKind] = CapabilityKind.RESOURCE_TEMPLATE

    uri_template: str
    name: str
    description: str | None = None
    handler: str
    mime_type: str | None = None
    extension: str

    @property
    def key(self) -> str:
        return self.uri_template


class Capabilities(BaseModel):
    """Capabilities of one or more extensions, keyed by natural key."""

    tools: dict[str, ToolRecord] = Field(default_factory=dict)
    resources: dict[str, ResourceRecord] = Field(default_factory=dict)
    prompts: dict[str, PromptRecord] = Field(default_factory=dict)
    resource_templates: dict[str, ResourceTemplateRecord] = Field(default_factory=dict)

    def section(self, kind: CapabilityKind) -> dict[str, Any]:
        return getattr(self, kind.attribute)

    def merge(self, other: Capabilities) -> Capabilities:
        """Return a new aggregate; on key collisions ``other`` wins."""
        return Capabilities(
            tools={**self.tools, **other.tools},
            resources={**self.resources, **other.resources},
            prompts={**self.prompts, **other.prompts},
            resource_templates={**self.resource_templates, **other.resource_templates},
        )

    def records(self) -> list[CapabilityRecord]:
        result: list[CapabilityRecord] = []
        for kind in CapabilityKind:
            result.extend(self.section(kind).values())
        return result

    @classmethod
    def from_records(cls, records: list[CapabilityRecord]) -> Capabilities:
        capabilities = cls()
        for record in records:
            capabilities.section(record.kind)[record.key] = record
        return capabilities

    def counts(self) -> dict[str, int]:
        return {kind.attribute: len(self.section(kind)) for kind in CapabilityKind}

    def is_empty(self) -> bool:
        return not any(self.counts().values())
