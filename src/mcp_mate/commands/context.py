"""Per-invocation wiring shared by the CLI commands."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from rich.console import Console

from mcp_mate.config.loader import MateConfig
from mcp_mate.discovery import (
    CapabilityCollector,
    FilteredDiscoveryLoader,
    ManifestExtensionDiscovery,
    ModuleScanner,
)
from mcp_mate.types import Capabilities, ExtensionDescriptor


def truncate(text: str | None, max_length: int = 50) -> str:
    """Truncate text for table display."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


@dataclass
class CommandContext:
    """Services one command needs, built fresh for every invocation."""

    config: MateConfig
    discovery: ManifestExtensionDiscovery
    loader: FilteredDiscoveryLoader
    collector: CapabilityCollector
    console: Console = field(default_factory=Console)
    _extensions: dict[str, ExtensionDescriptor] | None = field(default=None, repr=False)

    @classmethod
    def from_config(cls, config: MateConfig, console: Console | None = None) -> CommandContext:
        discovery = ManifestExtensionDiscovery(
            config.root_dir,
            lock_file=config.lock_file,
            manifest_file=config.manifest_file,
            vendor_dir=config.vendor_dir,
        )
        loader = FilteredDiscoveryLoader(
            scanner=ModuleScanner(config.root_dir),
            policy=config.policy,
            discovery=discovery,
        )
        return cls(
            config=config,
            discovery=discovery,
            loader=loader,
            collector=CapabilityCollector(loader),
            console=console or Console(),
        )

    def extensions(self) -> dict[str, ExtensionDescriptor]:
        """Active extensions, discovered once per command."""
        if self._extensions is None:
            self._extensions = self.loader.effective_extensions()
        return self._extensions

    def collect_all(self) -> Capabilities:
        return self.collector.collect_all(self.extensions())

    def print_json(self, data: Any) -> None:
        self.console.print(
            json.dumps(data, indent=2, ensure_ascii=False, default=str),
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )
