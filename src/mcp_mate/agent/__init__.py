"""Agent-facing helpers."""

from mcp_mate.agent.instructions import AgentInstructionsAggregator

__all__ = ["AgentInstructionsAggregator"]
