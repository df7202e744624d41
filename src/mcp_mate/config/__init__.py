"""Configuration module."""

from mcp_mate.config.loader import MateConfig, load_config

__all__ = ["MateConfig", "load_config"]
