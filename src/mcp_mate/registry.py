"""In-memory capability registry built for a single discovery run."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from mcp.types import Prompt, Resource, ResourceTemplate, Tool

from mcp_mate.errors import ToolNotFoundError
from mcp_mate.types import CapabilityKind

logger = logging.getLogger(__name__)


@dataclass
class RegisteredTool:
    """A tool descriptor with the handler implementing it."""

    kind: ClassVar[CapabilityKind] = CapabilityKind.TOOL

    tool: Tool
    handler: Callable[..., Any]
    handler_ref: str
    extension: str = ""

    @property
    def key(self) -> str:
        return self.tool.name


@dataclass
class RegisteredResource:
    """A resource descriptor. ``uri`` keeps the URI exactly as declared."""

    kind: ClassVar[CapabilityKind] = CapabilityKind.RESOURCE

    resource: Resource
    uri: str
    handler: Callable[..., Any]
    handler_ref: str
    extension: str = ""

    @property
    def key(self) -> str:
        return self.uri


@dataclass
class RegisteredPrompt:
    """A prompt descriptor with its handler."""

    kind: ClassVar[CapabilityKind] = CapabilityKind.PROMPT

    prompt: Prompt
    handler: Callable[..., Any]
    handler_ref: str
    extension: str = ""

    @property
    def key(self) -> str:
        return self.prompt.name


@dataclass
class RegisteredResourceTemplate:
    """A resource template descriptor with its handler."""

    kind: ClassVar[CapabilityKind] = CapabilityKind.RESOURCE_TEMPLATE

    template: ResourceTemplate
    handler: Callable[..., Any]
    handler_ref: str
    extension: str = ""

    @property
    def key(self) -> str:
        return self.template.uriTemplate


RegisteredEntry = Union[
    RegisteredTool, RegisteredResource, RegisteredPrompt, RegisteredResourceTemplate
]


class Registry:
    """Capabilities keyed by kind and natural key.

    A registry belongs to the one discovery run that fills it. Registering a
    key that already exists replaces the earlier entry (last write wins).
    """

    def __init__(self) -> None:
        self._entries: dict[CapabilityKind, dict[str, RegisteredEntry]] = {
            kind: {} for kind in CapabilityKind
        }

    def register(self, entry: RegisteredEntry) -> None:
        section = self._entries[entry.kind]
        previous = section.get(entry.key)
        if previous is not None:
            logger.debug(
                f"{entry.kind.value} {entry.key!r} from {previous.extension} "
                f"replaced by {entry.extension}"
            )
        section[entry.key] = entry

    def entries(self, kind: CapabilityKind) -> list[RegisteredEntry]:
        return list(self._entries[kind].values())

    def get(self, kind: CapabilityKind, key: str) -> RegisteredEntry | None:
        return self._entries[kind].get(key)

    def get_tool(self, name: str) -> RegisteredTool:
        entry = self._entries[CapabilityKind.TOOL].get(name)
        if not isinstance(entry, RegisteredTool):
            raise ToolNotFoundError(name)
        return entry

    def get_tools(self) -> list[RegisteredTool]:
        return [e for e in self._entries[CapabilityKind.TOOL].values() if isinstance(e, RegisteredTool)]

    def __len__(self) -> int:
        return sum(len(section) for section in self._entries.values())
