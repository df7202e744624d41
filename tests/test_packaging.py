"""Tests for the declared distribution metadata."""

from __future__ import annotations

import tomllib
from pathlib import Path

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


class TestDependencies:
    """Tests for the dependency declarations."""

    def test_mcp_pinned_to_major_1(self) -> None:
        """The mcp SDK is held below 2.0, whose descriptors use snake_case fields."""
        with PYPROJECT.open("rb") as f:
            dependencies = tomllib.load(f)["project"]["dependencies"]

        mcp = [d for d in dependencies if d.split(">")[0].split("<")[0].strip() == "mcp"]
        assert len(mcp) == 1
        assert "<2" in mcp[0].replace(" ", "")
