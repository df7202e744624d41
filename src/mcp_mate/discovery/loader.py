"""Loads the capabilities of active extensions into a registry."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace

from mcp_mate.discovery.manifest import ManifestExtensionDiscovery
from mcp_mate.discovery.scanner import CapabilityScanner, ScanResult
from mcp_mate.errors import ScanError
from mcp_mate.registry import Registry
from mcp_mate.types import ROOT_EXTENSION, EnablementPolicy, ExtensionDescriptor

logger = logging.getLogger(__name__)


class FilteredDiscoveryLoader:
    """Drives a CapabilityScanner over the extensions allowed by a policy.

    The extension set is either given explicitly or computed from manifest
    discovery: every enabled package followed by the root project, so the root
    project wins natural-key collisions.
    """

    def __init__(
        self,
        scanner: CapabilityScanner,
        policy: EnablementPolicy | None = None,
        extensions: Mapping[str, ExtensionDescriptor] | None = None,
        discovery: ManifestExtensionDiscovery | None = None,
    ) -> None:
        if extensions is None and discovery is None:
            raise ValueError("Either extensions or discovery must be provided")
        self._scanner = scanner
        self._policy = policy or EnablementPolicy()
        self._extensions = dict(extensions) if extensions is not None else None
        self._discovery = discovery

    @property
    def policy(self) -> EnablementPolicy:
        return self._policy

    def effective_extensions(self) -> dict[str, ExtensionDescriptor]:
        """Extensions this loader scans, in scan order."""
        if self._extensions is not None:
            return dict(self._extensions)

        if self._discovery is None:
            raise ValueError("No discovery configured")
        extensions = self._discovery.discover(self._policy.enabled_extensions)
        if extensions.pop(ROOT_EXTENSION, None) is not None:
            logger.warning(f"Ignoring package named {ROOT_EXTENSION}: the name is reserved")
        extensions[ROOT_EXTENSION] = self._discovery.discover_root_project()
        return extensions

    def with_extensions(self, extensions: Mapping[str, ExtensionDescriptor]) -> FilteredDiscoveryLoader:
        """A loader sharing scanner and policy, scoped to ``extensions`` only."""
        return FilteredDiscoveryLoader(
            scanner=self._scanner,
            policy=self._policy,
            extensions=extensions,
            discovery=self._discovery,
        )

    def load(self, registry: Registry) -> None:
        """Scan every effective extension and register what it provides."""
        for identifier, descriptor in self.effective_extensions().items():
            self._load_extension(registry, identifier, descriptor)

    def _load_extension(
        self, registry: Registry, identifier: str, descriptor: ExtensionDescriptor
    ) -> None:
        if self._policy.all_kinds_disabled(identifier):
            logger.debug(f"All capability kinds disabled for {identifier}, not scanning")
            return

        found = ScanResult()
        # One path per scan call so a bad path only loses its own contribution
        for directory in descriptor.scan_dirs:
            found.extend(self._scan(identifier, [directory], []))
        for include in descriptor.includes:
            found.extend(self._scan(identifier, [], [include]))

        registered = 0
        for entry in found.entries():
            if self._policy.is_capability_disabled(identifier, entry.kind, entry.key):
                logger.debug(f"{entry.kind.value} {entry.key!r} of {identifier} is disabled")
                continue
            registry.register(replace(entry, extension=identifier))
            registered += 1

        logger.debug(f"Loaded {registered} capabilities from {identifier}")

    def _scan(
        self, identifier: str, directories: Sequence[str], include_files: Sequence[str]
    ) -> ScanResult:
        try:
            return self._scanner.scan(directories, include_files)
        except ScanError as e:
            logger.warning(f"Skipping {e.path} of extension {identifier}: {e.reason}")
            return ScanResult()
