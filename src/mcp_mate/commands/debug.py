"""Diagnostics: debug:extensions and debug:capabilities."""

from __future__ import annotations

from typing import Any

from rich.markup import escape

from mcp_mate.commands.context import CommandContext, truncate
from mcp_mate.errors import ExtensionNotFoundError
from mcp_mate.types import Capabilities, CapabilityKind, ExtensionDescriptor


def _describe_extension(
    descriptor: ExtensionDescriptor, *, enabled: bool, loaded: bool
) -> dict[str, Any]:
    info: dict[str, Any] = {
        "type": "root_project" if descriptor.is_root else "vendor_extension",
        "status": "enabled" if enabled else "disabled",
        "loaded": loaded,
        "scan_dirs": descriptor.scan_dirs,
        "includes": descriptor.includes,
    }
    if descriptor.instructions:
        info["agent_instructions"] = descriptor.instructions
    return info


def debug_extensions(ctx: CommandContext, show_all: bool = False, output_format: str = "text") -> int:
    """debug:extensions - Show discovered extensions and their enablement."""
    policy = ctx.loader.policy
    active = ctx.extensions()
    discovered = ctx.discovery.discover()

    report: dict[str, dict[str, Any]] = {}
    for identifier, descriptor in active.items():
        report[identifier] = _describe_extension(
            descriptor, enabled=True, loaded=not policy.all_kinds_disabled(identifier)
        )
    for identifier, descriptor in discovered.items():
        if identifier not in report:
            report[identifier] = _describe_extension(descriptor, enabled=False, loaded=False)

    vendor = {k: v for k, v in report.items() if v["type"] == "vendor_extension"}
    enabled = {k: v for k, v in vendor.items() if v["status"] == "enabled"}
    disabled = {k: v for k, v in vendor.items() if v["status"] == "disabled"}
    summary = {
        "total_discovered": len(vendor),
        "enabled": len(enabled),
        "disabled": len(disabled),
        "loaded": sum(1 for v in report.values() if v["loaded"]),
    }

    if output_format == "json":
        ctx.print_json({"extensions": report, "summary": summary})
        return 0

    console = ctx.console
    console.rule("[bold]MCP Extension Discovery[/bold]")

    root = next((v for k, v in report.items() if v["type"] == "root_project"), None)
    if root is not None:
        console.print()
        console.print("[bold]Root Project[/bold]")
        _print_extension_details(ctx, root)

    console.print()
    console.print(f"[bold]Enabled Extensions ({len(enabled)})[/bold]")
    if not enabled:
        console.print("  [dim]none[/dim]")
    for identifier, info in enabled.items():
        marker = "[green]loaded[/green]" if info["loaded"] else "[yellow]not loaded[/yellow]"
        console.print(f"  [cyan]{escape(identifier)}[/cyan] ({marker})")
        _print_extension_details(ctx, info, indent="    ")

    if show_all:
        console.print()
        console.print(f"[bold]Disabled Extensions ({len(disabled)})[/bold]")
        if not disabled:
            console.print("  [dim]none[/dim]")
        for identifier, info in disabled.items():
            console.print(f"  [red]{escape(identifier)}[/red]")
            _print_extension_details(ctx, info, indent="    ")
    elif disabled:
        console.print()
        console.print(
            f"[dim]{len(disabled)} disabled extension(s) hidden, use --show-all to list them[/dim]"
        )

    console.print()
    console.print("[bold]Summary[/bold]")
    console.print(f"  Total discovered: {summary['total_discovered']}")
    console.print(f"  Enabled: {summary['enabled']}")
    console.print(f"  Disabled: {summary['disabled']}")
    console.print(f"  Loaded: {summary['loaded']}")
    return 0


def _print_extension_details(ctx: CommandContext, info: dict[str, Any], indent: str = "  ") -> None:
    scan_dirs = ", ".join(info["scan_dirs"]) or "none"
    includes = ", ".join(info["includes"]) or "none"
    ctx.console.print(f"{indent}Scan dirs: {escape(scan_dirs)}")
    ctx.console.print(f"{indent}Includes: {escape(includes)}")
    if "agent_instructions" in info:
        ctx.console.print(f"{indent}Instructions: {escape(info['agent_instructions'])}")


def debug_capabilities(
    ctx: CommandContext,
    extension: str | None = None,
    kind: str | None = None,
    output_format: str = "text",
) -> int:
    """debug:capabilities - Show capabilities grouped by extension.

    Unlike mcp:capabilities:list, an extension or section with nothing in
    it is reported rather than treated as an error.
    """
    extensions = ctx.extensions()
    if extension is not None and extension not in extensions:
        available = list(extensions)
        raise ExtensionNotFoundError(
            f'Extension "{extension}" not found. Available extensions: {", ".join(available)}',
            extension=extension,
            available=available,
        )
    kinds = [CapabilityKind.parse(kind)] if kind is not None else list(CapabilityKind)

    selected = {extension: extensions[extension]} if extension is not None else extensions
    per_extension: dict[str, Capabilities] = {
        identifier: ctx.collector.collect_capabilities(identifier, descriptor)
        for identifier, descriptor in selected.items()
    }

    summary: dict[str, int] = {"extensions": len(per_extension)}
    for k in CapabilityKind:
        summary[k.attribute] = sum(len(c.section(k)) for c in per_extension.values()) if k in kinds else 0

    if output_format == "json":
        ctx.print_json(
            {
                "extensions": {
                    identifier: {
                        k.attribute: {key: r.model_dump() for key, r in caps.section(k).items()}
                        for k in kinds
                    }
                    for identifier, caps in per_extension.items()
                },
                "summary": summary,
            }
        )
        return 0

    console = ctx.console
    console.rule("[bold]Mate MCP Capabilities[/bold]")

    for identifier, caps in per_extension.items():
        title = "Root Project" if extensions[identifier].is_root else identifier
        console.print()
        console.print(f"[bold cyan]{escape(title)}[/bold cyan]")
        for k in kinds:
            section = caps.section(k)
            label = k.attribute.replace("_", " ").title()
            console.print(f"  [bold]{label} ({len(section)})[/bold]")
            for key, record in section.items():
                description = truncate(record.description, 60)
                suffix = f" - {escape(description)}" if description else ""
                console.print(f"    {escape(key)}{suffix}")

    console.print()
    console.print("[bold]Summary[/bold]")
    console.print(f"  Extensions: {summary['extensions']}")
    for k in kinds:
        console.print(f"  {k.attribute.replace('_', ' ').title()}: {summary[k.attribute]}")
    return 0
