"""MCP Mate - discover, filter and inspect MCP capabilities of a project and its extensions."""

from mcp_mate.types import ROOT_EXTENSION

__version__ = "0.3.0"

__all__ = ["ROOT_EXTENSION", "__version__"]
