"""Filters over flattened capability records.

Every filter keeps the input order, and raises instead of returning an empty
list, so a command never prints an empty listing for a filter that matched
nothing. Filters can be applied in any order.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TypeVar

from mcp_mate.errors import CapabilityNotFoundError, ExtensionNotFoundError, PatternNotFoundError
from mcp_mate.types import CapabilityKind, CapabilityRecord

R = TypeVar("R", bound=CapabilityRecord)


def _unique(values: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(values))


def filter_by_extension(records: Sequence[R], extension: str, label: str = "capabilities") -> list[R]:
    """Keep records owned by ``extension``."""
    filtered = [r for r in records if r.extension_name == extension]
    if not filtered:
        available = _unique([r.extension_name for r in records])
        raise ExtensionNotFoundError(
            f'No {label} found for extension "{extension}". '
            f'Available extensions: "{", ".join(available)}"',
            extension=extension,
            available=available,
        )
    return filtered


def pattern_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a ``*``/``?`` wildcard pattern into a case-insensitive regex.

    Use ``fullmatch`` so the whole key has to match.
    """
    escaped = re.escape(pattern).replace(r"\*", ".*").replace(r"\?", ".")
    return re.compile(escaped, re.IGNORECASE | re.DOTALL)


def filter_by_name_pattern(records: Sequence[R], pattern: str, label: str = "capabilities") -> list[R]:
    """Keep records whose natural key matches the wildcard ``pattern``."""
    regex = pattern_to_regex(pattern)
    filtered = [r for r in records if regex.fullmatch(r.key)]
    if not filtered:
        raise PatternNotFoundError(f'No {label} found matching pattern "{pattern}"', pattern=pattern)
    return filtered


def filter_by_kind(records: Sequence[R], kind: str | CapabilityKind) -> list[R]:
    """Keep records of one capability kind."""
    parsed = CapabilityKind.parse(kind)
    filtered = [r for r in records if r.kind is parsed]
    if not filtered:
        raise CapabilityNotFoundError(f'No capabilities of type "{parsed.value}" found')
    return filtered
