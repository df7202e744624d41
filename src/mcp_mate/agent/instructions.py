"""Aggregates agent instructions from all active extensions.

Each extension can ship an instructions document (typically INSTRUCTIONS.md)
telling an AI agent which MCP tools to prefer over running CLI commands. The
aggregate is meant for the ``instructions`` field of an MCP handshake.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from mcp_mate.types import ExtensionDescriptor

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n---\n\n"

GLOBAL_HEADER = """# AI Mate Agent Instructions

This MCP server provides specialized tools for this project.
The following extensions are installed and provide MCP tools that you should
prefer over running CLI commands directly."""


class AgentInstructionsAggregator:
    """Joins the instructions documents of a set of extensions."""

    def __init__(self, root_dir: Path | str, extensions: Mapping[str, ExtensionDescriptor]) -> None:
        self._root_dir = Path(root_dir)
        self._extensions = extensions

    def aggregate(self) -> str | None:
        """Return the combined document, or None when no extension has one."""
        sections: list[str] = []
        for identifier, descriptor in self._extensions.items():
            if descriptor.instructions is None:
                continue
            content = self._read(identifier, self._root_dir / descriptor.instructions)
            if content is not None:
                sections.append(content)

        if not sections:
            return None

        return SECTION_SEPARATOR.join([GLOBAL_HEADER, *sections])

    def _read(self, source: str, path: Path) -> str | None:
        if not path.is_file():
            logger.warning(f"Agent instructions file not found for {source}: {path}")
            return None

        try:
            content = path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read agent instructions for {source} at {path}: {e}")
            return None

        if not content:
            logger.debug(f"Empty agent instructions file for {source}: {path}")
            return None

        logger.debug(f"Loaded agent instructions for {source} from {path} ({len(content)} chars)")
        return content
