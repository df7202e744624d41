#!/usr/bin/env python3
"""MCP Mate CLI."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import IO

from dotenv import load_dotenv

from mcp_mate.commands import (
    CommandContext,
    call_tool,
    debug_capabilities,
    debug_extensions,
    inspect_tool,
    list_capabilities,
    list_tools,
    show_instructions,
)
from mcp_mate.config import load_config
from mcp_mate.errors import LogWriteError, MateError

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


class StrictFileHandler(logging.FileHandler):
    """File handler that raises LogWriteError instead of printing a traceback."""

    def __init__(self, filename: str | Path) -> None:
        super().__init__(filename, mode="a", encoding="utf-8", delay=True)

    def _open(self) -> IO[str]:
        Path(self.baseFilename).parent.mkdir(parents=True, exist_ok=True)
        return super()._open()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            super().emit(record)
        except OSError as e:
            raise LogWriteError(f'Failed to write to log file: "{self.baseFilename}"') from e

    def handleError(self, record: logging.LogRecord) -> None:
        raise LogWriteError(f'Failed to write to log file: "{self.baseFilename}"')


def setup_logging(level: str, log_file: Path | None = None) -> None:
    """Configure logging."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Log to stderr so stdout only carries command output
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stderr,
    )

    if log_file is not None:
        handler = StrictFileHandler(log_file)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logging.getLogger().addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mate",
        description="MCP Mate - discover and inspect the MCP capabilities of a project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-r",
        "--root",
        type=Path,
        help="Project root directory (default: MATE_ROOT_DIR or current directory)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Config file path (YAML or JSON)",
    )
    parser.add_argument(
        "-l",
        "--log-level",
        choices=["debug", "info", "warn", "error"],
        default="warn",
        help="Log level (default: warn)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only show errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    tools_list = subparsers.add_parser("mcp:tools:list", help="List available MCP tools")
    tools_list.add_argument("--filter", dest="pattern", help='Name pattern, e.g. "php-*"')
    tools_list.add_argument("--extension", help="Only tools from this extension")
    tools_list.add_argument("--format", choices=["table", "json"], default="table")

    tools_inspect = subparsers.add_parser("mcp:tools:inspect", help="Show one tool and its schema")
    tools_inspect.add_argument("name", help="Tool name")
    tools_inspect.add_argument("--format", choices=["text", "json"], default="text")

    tools_call = subparsers.add_parser("mcp:tools:call", help="Run a tool with JSON arguments")
    tools_call.add_argument("name", help="Tool name")
    tools_call.add_argument("json_input", metavar="JSON", help='Arguments object, e.g. \'{"a": 1}\'')
    tools_call.add_argument("--format", choices=["pretty", "json"], default="pretty")

    caps_list = subparsers.add_parser("mcp:capabilities:list", help="List every kind of capability")
    caps_list.add_argument(
        "--type",
        dest="kind",
        help="tool, resource, prompt or resource_template",
    )
    caps_list.add_argument("--extension", help="Only capabilities from this extension")
    caps_list.add_argument("--filter", dest="pattern", help="Name or URI pattern")
    caps_list.add_argument("--format", choices=["table", "json"], default="table")

    debug_ext = subparsers.add_parser("debug:extensions", help="Show extension discovery details")
    debug_ext.add_argument("--show-all", action="store_true", help="Include disabled extensions")
    debug_ext.add_argument("--format", choices=["text", "json"], default="text")

    debug_caps = subparsers.add_parser("debug:capabilities", help="Show capabilities per extension")
    debug_caps.add_argument("--extension", help="Only this extension")
    debug_caps.add_argument("--type", dest="kind", help="Only this capability type")
    debug_caps.add_argument("--format", choices=["text", "json"], default="text")

    subparsers.add_parser("instructions", help="Print aggregated agent instructions")

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


COMMANDS: dict[str, Callable[[CommandContext, argparse.Namespace], int]] = {
    "mcp:tools:list": lambda ctx, a: list_tools(ctx, a.pattern, a.extension, a.format),
    "mcp:tools:inspect": lambda ctx, a: inspect_tool(ctx, a.name, a.format),
    "mcp:tools:call": lambda ctx, a: call_tool(ctx, a.name, a.json_input, a.format),
    "mcp:capabilities:list": lambda ctx, a: list_capabilities(
        ctx, a.kind, a.extension, a.pattern, a.format
    ),
    "debug:extensions": lambda ctx, a: debug_extensions(ctx, a.show_all, a.format),
    "debug:capabilities": lambda ctx, a: debug_capabilities(ctx, a.extension, a.kind, a.format),
    "instructions": lambda ctx, a: show_instructions(ctx),
}


def _report_error(args: argparse.Namespace, error: MateError) -> None:
    if getattr(args, "format", None) == "json":
        print(json.dumps({"error": True, "message": str(error)}, ensure_ascii=False))
    else:
        print(f"Error: {error}", file=sys.stderr)


def run(args: argparse.Namespace, ctx: CommandContext | None = None) -> int:
    """Run one command and return its exit code."""
    handler = COMMANDS.get(args.command or "")
    if handler is None:
        build_parser().print_help()
        return 0

    try:
        if ctx is None:
            config = load_config(root_dir=args.root, config_path=args.config)

            # Determine log level
            if args.debug or config.debug:
                log_level = "debug"
            elif args.quiet:
                log_level = "error"
            else:
                log_level = args.log_level

            setup_logging(log_level, config.log_path if config.log_to_file else None)
            ctx = CommandContext.from_config(config)

        return handler(ctx, args)
    except MateError as e:
        _report_error(args, e)
        return 1


def main() -> None:
    """Main entry point."""
    # Load .env file from current directory
    load_dotenv()

    args = parse_args()

    try:
        code = run(args)
    except KeyboardInterrupt:
        return
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
