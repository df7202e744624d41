"""CLI command implementations."""

from mcp_mate.commands.capabilities import list_capabilities
from mcp_mate.commands.context import CommandContext
from mcp_mate.commands.debug import debug_capabilities, debug_extensions
from mcp_mate.commands.instructions import show_instructions
from mcp_mate.commands.tools import call_tool, inspect_tool, list_tools

__all__ = [
    "CommandContext",
    "call_tool",
    "debug_capabilities",
    "debug_extensions",
    "inspect_tool",
    "list_capabilities",
    "list_tools",
    "show_instructions",
]
