"""Exception types for MCP Mate."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class MateError(Exception):
    """Base class for all errors reported to the user."""


class ConfigError(MateError):
    """Raised when the configuration file cannot be read or validated."""


class ScanError(MateError):
    """Raised by a scanner for a single path it could not read."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot scan {self.path}: {reason}")


class NotFoundError(MateError):
    """A lookup or filter produced no result."""


class ExtensionNotFoundError(NotFoundError):
    """No records or extensions match the requested extension name."""

    def __init__(self, message: str, extension: str, available: Iterable[str]) -> None:
        self.extension = extension
        self.available = list(available)
        super().__init__(message)


class PatternNotFoundError(NotFoundError):
    """No records match a name pattern."""

    def __init__(self, message: str, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(message)


class CapabilityNotFoundError(NotFoundError):
    """No capability of the requested kind or name exists."""


class ToolNotFoundError(CapabilityNotFoundError):
    """A tool name could not be resolved."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f'Tool "{name}" not found. Use "mate mcp:tools:list" to see all available tools'
        )


class InvalidKindError(MateError):
    """An unknown capability kind was requested."""


class InvalidInputError(MateError):
    """User supplied input (e.g. JSON arguments) is malformed."""


class ToolExecutionError(MateError):
    """A tool handler raised while being called."""


class LogWriteError(MateError):
    """The log sink could not write a record."""
