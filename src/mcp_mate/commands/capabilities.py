"""mcp:capabilities:list - flat listing of every capability kind."""

from __future__ import annotations

from rich.markup import escape
from rich.table import Table

from mcp_mate.commands.context import CommandContext, truncate
from mcp_mate.filters import filter_by_extension, filter_by_kind, filter_by_name_pattern
from mcp_mate.types import CapabilityRecord


def list_capabilities(
    ctx: CommandContext,
    kind: str | None = None,
    extension: str | None = None,
    pattern: str | None = None,
    output_format: str = "table",
) -> int:
    records: list[CapabilityRecord] = ctx.collect_all().records()

    if kind is not None:
        records = filter_by_kind(records, kind)
    if extension is not None:
        records = filter_by_extension(records, extension)
    if pattern is not None:
        records = filter_by_name_pattern(records, pattern)

    if output_format == "json":
        ctx.print_json(
            {
                "capabilities": [{"type": r.kind.value, **r.model_dump()} for r in records],
                "summary": {"total": len(records)},
            }
        )
        return 0

    console = ctx.console
    console.rule("[bold]MCP Capabilities[/bold]")

    if not records:
        console.print("[yellow]No capabilities found[/yellow]")
        return 0

    table = Table()
    table.add_column("Type", style="magenta", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Extension", style="green")
    for r in records:
        table.add_row(
            r.kind.value,
            escape(r.key),
            escape(truncate(getattr(r, "description", None))),
            escape(r.extension_name),
        )
    console.print(table)
    console.print(f"Total: [bold]{len(records)}[/bold] capability(ies)")
    return 0
