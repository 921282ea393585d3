"""Target runners and the registry dispatching target types to them."""

from .base import TargetRunner
from .registry import (
    PluginLoadError,
    RunnerRegistry,
    UnknownTargetTypeError,
    create_registry,
    load_plugin_runners,
)

__all__ = [
    "TargetRunner",
    "RunnerRegistry",
    "UnknownTargetTypeError",
    "PluginLoadError",
    "create_registry",
    "load_plugin_runners",
]
