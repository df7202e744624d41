"""Tool commands: mcp:tools:list, mcp:tools:inspect and mcp:tools:call."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import Any

from pydantic import BaseModel
from rich.markup import escape
from rich.table import Table

from mcp_mate.commands.context import CommandContext, truncate
from mcp_mate.errors import InvalidInputError, ToolExecutionError, ToolNotFoundError
from mcp_mate.filters import filter_by_extension, filter_by_name_pattern
from mcp_mate.registry import Registry
from mcp_mate.types import ToolRecord

logger = logging.getLogger(__name__)


def list_tools(
    ctx: CommandContext,
    pattern: str | None = None,
    extension: str | None = None,
    output_format: str = "table",
) -> int:
    """mcp:tools:list - Show available tools, optionally filtered."""
    tools: list[ToolRecord] = list(ctx.collect_all().tools.values())

    if extension is not None:
        tools = filter_by_extension(tools, extension, label="tools")
    if pattern is not None:
        tools = filter_by_name_pattern(tools, pattern, label="tools")

    if output_format == "json":
        ctx.print_json(
            {
                "tools": {t.name: t.model_dump() for t in tools},
                "summary": {"total": len(tools)},
            }
        )
        return 0

    console = ctx.console
    console.rule("[bold]MCP Tools[/bold]")

    if not tools:
        console.print("[yellow]No tools found[/yellow]")
        return 0

    table = Table()
    table.add_column("Tool Name", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Handler")
    table.add_column("Extension", style="green")
    for t in tools:
        table.add_row(
            escape(t.name),
            escape(truncate(t.description)),
            escape(t.handler),
            escape(t.extension),
        )
    console.print(table)
    console.print(f"Total: [bold]{len(tools)}[/bold] tool(s)")
    return 0


def inspect_tool(ctx: CommandContext, name: str, output_format: str = "text") -> int:
    """mcp:tools:inspect - Show one tool with its input schema."""
    tool = ctx.collect_all().tools.get(name)
    if tool is None:
        raise ToolNotFoundError(name)

    if output_format == "json":
        ctx.print_json(tool.model_dump())
        return 0

    console = ctx.console
    console.rule(f"[bold]{escape(tool.name)}[/bold]")
    console.print(f"[bold]Description:[/bold] {escape(tool.description or 'N/A')}")
    console.print(f"[bold]Handler:[/bold] {escape(tool.handler)}")
    console.print(f"[bold]Extension:[/bold] {escape(tool.extension)}")
    console.print()
    console.print("[bold]Input Schema[/bold]")
    if tool.input_schema:
        console.print(
            json.dumps(tool.input_schema, indent=2),
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )
    else:
        console.print("[yellow]No input schema defined[/yellow]")
    return 0


def _parse_arguments(json_input: str) -> dict[str, Any]:
    try:
        params = json.loads(json_input)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Invalid JSON: {e.msg}") from e
    if not isinstance(params, dict):
        raise InvalidInputError("JSON input must be an object")
    return params


async def _await(awaitable: Any) -> Any:
    return await awaitable


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def _format_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def call_tool(
    ctx: CommandContext,
    name: str,
    json_input: str,
    output_format: str = "pretty",
) -> int:
    """mcp:tools:call - Run a tool handler with JSON arguments."""
    params = _parse_arguments(json_input)

    registry = Registry()
    ctx.loader.load(registry)
    entry = registry.get_tool(name)

    logger.debug(f"Calling {name} ({entry.handler_ref}) from {entry.extension}")
    try:
        result = entry.handler(**params)
        if inspect.isawaitable(result):
            result = asyncio.run(_await(result))
    except Exception as e:
        raise ToolExecutionError(f"{type(e).__name__}: {e}") from e

    result = _to_jsonable(result)

    if output_format == "json":
        ctx.print_json(result)
        return 0

    console = ctx.console
    console.rule(f"[bold]Executing Tool: {escape(name)}[/bold]")
    if entry.tool.description:
        console.print(escape(entry.tool.description))
    console.print()
    console.print("[bold]Result[/bold]")
    if isinstance(result, list):
        for item in result:
            console.print(_format_value(item), markup=False, highlight=False, emoji=False)
    elif isinstance(result, dict):
        for key, value in result.items():
            console.print(f"[bold]{escape(key)}:[/bold] {escape(_format_value(value))}")
    else:
        console.print(_format_value(result), markup=False, highlight=False, emoji=False)
    return 0
