"""Capability declaration API for extension authors.

Extensions declare MCP capabilities by decorating plain functions:

    from mcp_mate.capability import prompt, resource, tool

    @tool("php-version")
    def php_version() -> str:
        \"\"\"Get the version of PHP.\"\"\"
        ...

    @resource("config://app/settings", mime_type="application/json")
    def settings() -> dict: ...

Include files may instead (or additionally) define a module-level
``register(registrar)`` function and add capabilities imperatively through
the CapabilityRegistrar they receive.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from mcp_mate.types import CapabilityKind

F = TypeVar("F", bound=Callable[..., Any])

# Attribute the decorators store their metadata under
CAPABILITY_METADATA_ATTR = "__mate_capability__"


@dataclass(frozen=True)
class CapabilityMetadata:
    """What a decorator or registrar call declared about a handler."""

    kind: CapabilityKind
    name: str | None = None
    description: str | None = None
    uri: str | None = None  # resource URI or URI template
    mime_type: str | None = None


def _mark(metadata: CapabilityMetadata) -> Callable[[F], F]:
    def decorator(fn: F) -> F:
        if not callable(fn):
            raise TypeError(f"@{metadata.kind.value} can only decorate callables")
        setattr(fn, CAPABILITY_METADATA_ATTR, metadata)
        return fn

    return decorator


def tool(name: str | Callable[..., Any] | None = None, *, description: str | None = None) -> Any:
    """Declare a tool. Usable bare (``@tool``) or called (``@tool("name")``)."""
    if callable(name):
        return _mark(CapabilityMetadata(CapabilityKind.TOOL))(name)
    return _mark(CapabilityMetadata(CapabilityKind.TOOL, name=name, description=description))


def prompt(name: str | Callable[..., Any] | None = None, *, description: str | None = None) -> Any:
    """Declare a prompt template. Usable bare or called."""
    if callable(name):
        return _mark(CapabilityMetadata(CapabilityKind.PROMPT))(name)
    return _mark(CapabilityMetadata(CapabilityKind.PROMPT, name=name, description=description))


def resource(
    uri: str,
    *,
    name: str | None = None,
    description: str | None = None,
    mime_type: str | None = None,
) -> Callable[[F], F]:
    """Declare a readable resource served at ``uri``."""
    return _mark(
        CapabilityMetadata(
            CapabilityKind.RESOURCE,
            name=name,
            description=description,
            uri=uri,
            mime_type=mime_type,
        )
    )


def resource_template(
    uri_template: str,
    *,
    name: str | None = None,
    description: str | None = None,
    mime_type: str | None = None,
) -> Callable[[F], F]:
    """Declare a parametric resource, e.g. ``logs://{channel}``."""
    return _mark(
        CapabilityMetadata(
            CapabilityKind.RESOURCE_TEMPLATE,
            name=name,
            description=description,
            uri=uri_template,
            mime_type=mime_type,
        )
    )


def get_capability_metadata(obj: object) -> CapabilityMetadata | None:
    """Return the declaration attached to ``obj``, if any."""
    if not callable(obj):
        return None
    metadata = getattr(obj, CAPABILITY_METADATA_ATTR, None)
    return metadata if isinstance(metadata, CapabilityMetadata) else None


class CapabilityRegistrar:
    """Collects capabilities registered imperatively by include files."""

    def __init__(self) -> None:
        self.entries: list[tuple[CapabilityMetadata, Callable[..., Any]]] = []

    def add_tool(
        self,
        handler: Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
    ) -> None:
        self.entries.append(
            (CapabilityMetadata(CapabilityKind.TOOL, name=name, description=description), handler)
        )

    def add_prompt(
        self,
        handler: Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
    ) -> None:
        self.entries.append(
            (CapabilityMetadata(CapabilityKind.PROMPT, name=name, description=description), handler)
        )

    def add_resource(
        self,
        handler: Callable[..., Any],
        uri: str,
        name: str | None = None,
        description: str | None = None,
        mime_type: str | None = None,
    ) -> None:
        self.entries.append(
            (
                CapabilityMetadata(
                    CapabilityKind.RESOURCE,
                    name=name,
                    description=description,
                    uri=uri,
                    mime_type=mime_type,
                ),
                handler,
            )
        )

    def add_resource_template(
        self,
        handler: Callable[..., Any],
        uri_template: str,
        name: str | None = None,
        description: str | None = None,
        mime_type: str | None = None,
    ) -> None:
        self.entries.append(
            (
                CapabilityMetadata(
                    CapabilityKind.RESOURCE_TEMPLATE,
                    name=name,
                    description=description,
                    uri=uri_template,
                    mime_type=mime_type,
                ),
                handler,
            )
        )
