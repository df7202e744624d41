"""Shared fixtures: throwaway projects with extensions on disk."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

PHP_TOOLS = '''
from mcp_mate.capability import tool


@tool("php-version")
def php_version() -> str:
    """Get the version of PHP."""
    return "8.3.0"


@tool("php-extensions")
def php_extensions(loaded_only: bool = True) -> list:
    """List PHP extensions."""
    return ["json", "mbstring"]
'''

LOG_CAPABILITIES = '''
from mcp_mate.capability import prompt, resource, resource_template, tool


@tool("search-logs")
def search_logs(query: str, limit: int = 10) -> dict:
    """Search application logs.

    Matches are returned newest first.
    """
    return {"query": query, "limit": limit, "matches": []}


@resource("logs://channels", name="channels", mime_type="application/json")
def channels() -> list:
    return ["app", "security"]


@resource_template("logs://{channel}", name="channel-log")
def channel_log(channel: str) -> str:
    return ""


@prompt("explain-error")
def explain_error(message: str, context: str = "") -> str:
    """Explain an error message."""
    return message
'''

ROOT_TOOLS = '''
from mcp_mate.capability import tool


@tool("app-info")
def app_info(verbose: bool = False) -> dict:
    """Describe the application."""
    return {"name": "demo", "verbose": verbose}


@tool
async def ping(message: str = "pong") -> str:
    """Echo a message back."""
    return message


@tool("explode")
def explode() -> None:
    """Always fails."""
    raise RuntimeError("boom")
'''


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


def write_lock(root: Path, packages: list[dict[str, Any]], lock_file: str = "vendor/installed.json") -> Path:
    return write_file(root / lock_file, json.dumps({"packages": packages}, indent=2))


def write_pyproject(root: Path, block: str) -> Path:
    return write_file(
        root / "pyproject.toml",
        '[project]\nname = "demo-app"\nversion = "1.0.0"\n\n[tool.mate]\n' + block,
    )


def package(name: str, **mate: Any) -> dict[str, Any]:
    """A lock document entry for ``name`` with an ``extra.mate`` block."""
    return {"name": name, "version": "1.0.0", "extra": {"mate": mate}}


def console_output(console: Console) -> str:
    file = console.file
    assert isinstance(file, io.StringIO)
    return file.getvalue()


@pytest.fixture
def console() -> Console:
    """A console that records output instead of printing it."""
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def demo_project(tmp_path: Path) -> Path:
    """A project with two enabled extensions, one opted out, and root capabilities.

    vendor/acme/php-tools     tools php-version, php-extensions
    vendor/acme/log-tools     tool search-logs, a resource, a template and a prompt
    vendor/acme/quiet         declares extension: false
    root project (_custom)    tools app-info, ping (async), explode
    """
    write_file(tmp_path / "vendor/acme/php-tools/src/php.py", PHP_TOOLS)
    write_file(tmp_path / "vendor/acme/log-tools/src/logs.py", LOG_CAPABILITIES)
    write_file(
        tmp_path / "vendor/acme/log-tools/INSTRUCTIONS.md",
        "## Logs\n\nUse search-logs instead of grep.\n",
    )
    write_file(tmp_path / "vendor/acme/quiet/src/quiet.py", PHP_TOOLS)
    write_file(tmp_path / "mate/tools.py", ROOT_TOOLS)

    write_lock(
        tmp_path,
        [
            package("acme/php-tools", **{"scan-dirs": ["src"]}),
            package(
                "acme/log-tools",
                **{"scan-dirs": ["src"], "instructions": "INSTRUCTIONS.md"},
            ),
            package("acme/quiet", extension=False, **{"scan-dirs": ["src"]}),
            {"name": "acme/plain-library", "version": "2.0.0"},
        ],
    )
    # install-path is relative to the lock document, so point it back at vendor/
    lock = json.loads((tmp_path / "vendor/installed.json").read_text())
    for entry in lock["packages"]:
        entry["install-path"] = entry["name"]
    (tmp_path / "vendor/installed.json").write_text(json.dumps(lock))

    write_pyproject(tmp_path, 'scan-dirs = ["mate"]\n')
    return tmp_path
