"""Extension discovery from the dependency lock document and project manifest."""

from __future__ import annotations

import json
import logging
import posixpath
import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from mcp_mate.types import ROOT_EXTENSION, ExtensionDescriptor

logger = logging.getLogger(__name__)

# Key of the configuration block under a package's "extra" section and
# under the root manifest's [tool] table
CONFIG_KEY = "mate"

DEFAULT_LOCK_FILE = "vendor/installed.json"
DEFAULT_MANIFEST_FILE = "pyproject.toml"
DEFAULT_VENDOR_DIR = "vendor"


class ManifestExtensionDiscovery:
    """Finds extensions declared by installed packages and by the root project.

    The lock document lists installed packages::

        {"packages": [
            {"name": "vendor/pkg-a",
             "install-path": "vendor/pkg-a",
             "extra": {"mate": {"scan-dirs": ["src"], "includes": [],
                                "instructions": "INSTRUCTIONS.md"}}}
        ]}

    ``install-path`` is relative to the lock document's directory and defaults
    to ``<vendor_dir>/<name>`` relative to the project root. The root project
    declares the same block as ``[tool.mate]`` in its pyproject.toml.

    Discovery never fails: missing or malformed documents are logged and
    contribute nothing.
    """

    def __init__(
        self,
        root_dir: Path | str,
        lock_file: str = DEFAULT_LOCK_FILE,
        manifest_file: str = DEFAULT_MANIFEST_FILE,
        vendor_dir: str = DEFAULT_VENDOR_DIR,
    ) -> None:
        self._root_dir = Path(root_dir)
        self._lock_file = lock_file
        self._manifest_file = manifest_file
        self._vendor_dir = vendor_dir

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def discover(
        self, enabled_extensions: Iterable[str] | None = None
    ) -> dict[str, ExtensionDescriptor]:
        """Discover dependency packages that provide extensions.

        Packages flagged ``extension: false`` are always skipped. When
        ``enabled_extensions`` is non-empty only packages named in it are kept.
        """
        blocks: dict[str, tuple[dict[str, Any], dict[str, Any]]] = {}
        for package in self._read_packages():
            name = package.get("name")
            if not isinstance(name, str) or not name:
                logger.warning(f"Skipping package record without a name in {self._lock_path}")
                continue

            extra = package.get("extra")
            block = extra.get(CONFIG_KEY) if isinstance(extra, dict) else None
            if block is None:
                continue
            if not isinstance(block, dict):
                logger.warning(f"Ignoring {name}: extra.{CONFIG_KEY} must be an object")
                continue
            blocks[name] = (package, block)

        # Opt-out flag first, so the whitelist can never re-enable a package
        opted_in = {
            name: entry for name, entry in blocks.items() if entry[1].get("extension", True) is not False
        }
        for name in blocks.keys() - opted_in.keys():
            logger.debug(f"Package {name} declares extension: false, skipping")

        enabled = set(enabled_extensions or ())
        if enabled:
            opted_in = {name: entry for name, entry in opted_in.items() if name in enabled}

        extensions: dict[str, ExtensionDescriptor] = {}
        for name, (package, block) in opted_in.items():
            try:
                extensions[name] = ExtensionDescriptor.from_config_block(
                    name, block, base=self._install_path(name, package)
                )
            except ValueError as e:
                logger.warning(f"Ignoring {name}: invalid extra.{CONFIG_KEY} block: {e}")

        logger.debug(f"Discovered {len(extensions)} extension(s) in {self._lock_path}")
        return extensions

    def discover_root_project(self) -> ExtensionDescriptor:
        """Read the root project's own declaration; always returns a descriptor."""
        empty = ExtensionDescriptor(identifier=ROOT_EXTENSION)
        manifest_path = self._root_dir / self._manifest_file

        if not manifest_path.is_file():
            logger.debug(f"No project manifest at {manifest_path}")
            return empty

        try:
            with manifest_path.open("rb") as f:
                document = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Cannot read project manifest {manifest_path}: {e}")
            return empty

        tool_table = document.get("tool")
        block = tool_table.get(CONFIG_KEY) if isinstance(tool_table, dict) else None
        if block is None:
            return empty
        if not isinstance(block, dict):
            logger.warning(f"Ignoring [tool.{CONFIG_KEY}] in {manifest_path}: must be a table")
            return empty

        try:
            return ExtensionDescriptor.from_config_block(ROOT_EXTENSION, block)
        except ValueError as e:
            logger.warning(f"Ignoring [tool.{CONFIG_KEY}] in {manifest_path}: {e}")
            return empty

    @property
    def _lock_path(self) -> Path:
        return self._root_dir / self._lock_file

    def _read_packages(self) -> list[dict[str, Any]]:
        path = self._lock_path
        if not path.is_file():
            logger.debug(f"No lock document at {path}")
            return []

        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Malformed lock document {path}: {e}")
            return []

        packages = document.get("packages") if isinstance(document, dict) else document
        if not isinstance(packages, list):
            logger.warning(f"Malformed lock document {path}: expected a list of packages")
            return []

        return [p for p in packages if isinstance(p, dict)]

    def _install_path(self, name: str, package: dict[str, Any]) -> str:
        install_path = package.get("install-path")
        if isinstance(install_path, str) and install_path:
            lock_dir = posixpath.dirname(Path(self._lock_file).as_posix())
            return posixpath.normpath(posixpath.join(lock_dir, install_path))
        return posixpath.join(self._vendor_dir, name)
