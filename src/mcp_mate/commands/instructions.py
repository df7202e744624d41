"""instructions - print the aggregated agent instructions."""

from __future__ import annotations

from mcp_mate.agent import AgentInstructionsAggregator
from mcp_mate.commands.context import CommandContext


def show_instructions(ctx: CommandContext) -> int:
    aggregator = AgentInstructionsAggregator(ctx.config.root_dir, ctx.extensions())
    content = aggregator.aggregate()
    if content is None:
        ctx.console.print("[yellow]No agent instructions found[/yellow]")
        return 0

    ctx.console.print(content, markup=False, highlight=False, emoji=False, soft_wrap=True)
    return 0
