"""Discovery module: extensions, capability scanning and collection."""

from mcp_mate.discovery.collector import CapabilityCollector
from mcp_mate.discovery.loader import FilteredDiscoveryLoader
from mcp_mate.discovery.manifest import ManifestExtensionDiscovery
from mcp_mate.discovery.scanner import CapabilityScanner, ModuleScanner, ScanResult

__all__ = [
    "CapabilityCollector",
    "FilteredDiscoveryLoader",
    "ManifestExtensionDiscovery",
    "CapabilityScanner",
    "ModuleScanner",
    "ScanResult",
]
