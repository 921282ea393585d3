"""Configuration system for snap-orchestrator.

This module provides JSON/TOML configuration loading, validation,
and schema definitions for snapshot orchestration.
"""

from .loader import ConfigError, find_config_file, load_config, parse_config
from .schema import SnapConfig, TargetConfig, TaskSpec

__all__ = [
    "SnapConfig",
    "TargetConfig",
    "TaskSpec",
    "load_config",
    "parse_config",
    "find_config_file",
    "ConfigError",
]
