"""Configuration loading for MCP Mate.

Settings come from ``mate/config.yaml`` (or ``.yml`` / ``.json``) below the
project root, then environment variables override individual values:

    MATE_ROOT_DIR        project root (default: current directory)
    MATE_CONFIG          explicit configuration file
    MATE_DEBUG           enable debug logging
    MATE_DEBUG_FILE      also write log records to a file
    MATE_DEBUG_LOG_FILE  log file path, relative to the project root
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from mcp_mate.discovery.manifest import DEFAULT_LOCK_FILE, DEFAULT_MANIFEST_FILE, DEFAULT_VENDOR_DIR
from mcp_mate.errors import ConfigError
from mcp_mate.types import EnablementPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = ("mate/config.yaml", "mate/config.yml", "mate/config.json")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class MateConfig(BaseModel):
    """Resolved settings for one invocation."""

    root_dir: Path = Field(default_factory=Path.cwd)
    enabled_extensions: list[str] = Field(default_factory=list)
    disabled_features: dict[str, dict[str, bool]] = Field(default_factory=dict)
    lock_file: str = DEFAULT_LOCK_FILE
    manifest_file: str = DEFAULT_MANIFEST_FILE
    vendor_dir: str = DEFAULT_VENDOR_DIR
    debug: bool = False
    log_to_file: bool = False
    log_file: str = "dev.log"

    @property
    def policy(self) -> EnablementPolicy:
        return EnablementPolicy(
            enabled_extensions=self.enabled_extensions,
            disabled_features=self.disabled_features,
        )

    @property
    def log_path(self) -> Path:
        return self.root_dir / self.log_file


def _parse_bool(name: str, value: str) -> bool | None:
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    logger.warning(f"Ignoring {name}={value!r}: not a boolean")
    return None


def _find_config_file(root_dir: Path) -> Path | None:
    for candidate in DEFAULT_CONFIG_FILES:
        path = root_dir / candidate
        if path.is_file():
            return path
    return None


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {path}: top level must be a mapping")
    return data


def load_config(
    root_dir: Path | None = None,
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> MateConfig:
    """Load configuration for the project at ``root_dir``.

    An explicitly requested file must exist; the default locations are
    optional.
    """
    if env is None:
        env = os.environ

    if root_dir is None:
        root_dir = Path(env["MATE_ROOT_DIR"]) if env.get("MATE_ROOT_DIR") else Path.cwd()

    if config_path is None and env.get("MATE_CONFIG"):
        config_path = Path(env["MATE_CONFIG"])

    if config_path is not None:
        if not config_path.is_absolute():
            config_path = root_dir / config_path
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        data = _read_config_file(config_path)
    else:
        found = _find_config_file(root_dir)
        data = _read_config_file(found) if found else {}

    overrides: dict[str, Any] = {}
    for var, key in (("MATE_DEBUG", "debug"), ("MATE_DEBUG_FILE", "log_to_file")):
        if var in env:
            parsed = _parse_bool(var, env[var])
            if parsed is not None:
                overrides[key] = parsed
    if env.get("MATE_DEBUG_LOG_FILE"):
        overrides["log_file"] = env["MATE_DEBUG_LOG_FILE"]

    try:
        return MateConfig.model_validate({**data, **overrides, "root_dir": root_dir})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
