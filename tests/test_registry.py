"""Tests for the capability registry."""

from __future__ import annotations

from dataclasses import replace

import pytest

from mcp_mate.capability import CapabilityMetadata
from mcp_mate.discovery.scanner import build_entry
from mcp_mate.errors import ToolNotFoundError
from mcp_mate.registry import RegisteredTool, Registry
from mcp_mate.types import CapabilityKind


def make_tool(name: str, extension: str = "acme/a") -> RegisteredTool:
    entry = build_entry(CapabilityMetadata(CapabilityKind.TOOL, name=name), lambda: name, f"x.py:{name}")
    assert isinstance(entry, RegisteredTool)
    return replace(entry, extension=extension)


class TestRegistry:
    """Tests for Registry."""

    def test_register_and_get(self) -> None:
        """Registered tools can be looked up by name."""
        registry = Registry()
        registry.register(make_tool("php-version"))

        assert registry.get_tool("php-version").key == "php-version"
        assert registry.get(CapabilityKind.TOOL, "php-version") is not None
        assert registry.get(CapabilityKind.PROMPT, "php-version") is None
        assert len(registry) == 1

    def test_last_write_wins(self) -> None:
        """A later registration replaces an earlier one with the same key."""
        registry = Registry()
        registry.register(make_tool("lint", extension="acme/a"))
        registry.register(make_tool("lint", extension="_custom"))

        assert len(registry) == 1
        assert registry.get_tool("lint").extension == "_custom"

    def test_unknown_tool(self) -> None:
        """Looking up a missing tool raises ToolNotFoundError with a hint."""
        with pytest.raises(ToolNotFoundError) as exc_info:
            Registry().get_tool("nope")

        assert str(exc_info.value).startswith('Tool "nope" not found')
        assert "mcp:tools:list" in str(exc_info.value)

    def test_entries_by_kind(self) -> None:
        """entries() lists one kind in registration order."""
        registry = Registry()
        registry.register(make_tool("b"))
        registry.register(make_tool("a"))

        assert [e.key for e in registry.entries(CapabilityKind.TOOL)] == ["b", "a"]
        assert registry.entries(CapabilityKind.RESOURCE) == []
        assert [t.key for t in registry.get_tools()] == ["b", "a"]
