"""Tests for agent instructions aggregation."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from conftest import write_file

from mcp_mate.agent import AgentInstructionsAggregator
from mcp_mate.agent.instructions import GLOBAL_HEADER, SECTION_SEPARATOR
from mcp_mate.types import ROOT_EXTENSION, ExtensionDescriptor


class TestAgentInstructionsAggregator:
    """Tests for AgentInstructionsAggregator."""

    def test_sections_in_extension_order(self, tmp_path: Path) -> None:
        """Sections follow the header in extension order, trimmed."""
        write_file(tmp_path / "vendor/a/AGENTS.md", "\n## A\n\nUse a-tool.\n\n")
        write_file(tmp_path / "mate/AGENTS.md", "## Project\n")
        extensions = {
            "acme/a": ExtensionDescriptor(identifier="acme/a", instructions="vendor/a/AGENTS.md"),
            "acme/none": ExtensionDescriptor(identifier="acme/none"),
            ROOT_EXTENSION: ExtensionDescriptor(identifier=ROOT_EXTENSION, instructions="mate/AGENTS.md"),
        }

        content = AgentInstructionsAggregator(tmp_path, extensions).aggregate()

        assert content == SECTION_SEPARATOR.join([GLOBAL_HEADER, "## A\n\nUse a-tool.", "## Project"])

    def test_none_without_instructions(self, tmp_path: Path) -> None:
        """Nothing to aggregate gives None."""
        extensions = {"acme/a": ExtensionDescriptor(identifier="acme/a")}

        assert AgentInstructionsAggregator(tmp_path, extensions).aggregate() is None

    def test_missing_and_empty_files(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Missing files are warned about and empty files skipped."""
        write_file(tmp_path / "empty.md", "   \n")
        extensions = {
            "acme/missing": ExtensionDescriptor(identifier="acme/missing", instructions="nope.md"),
            "acme/empty": ExtensionDescriptor(identifier="acme/empty", instructions="empty.md"),
        }

        with caplog.at_level(logging.WARNING):
            content = AgentInstructionsAggregator(tmp_path, extensions).aggregate()

        assert content is None
        assert "not found for acme/missing" in caplog.text
        assert "acme/empty" not in caplog.text
