"""Configuration schema definitions using dataclasses.

Defines the structure of a snap configuration: global properties and the
ordered list of targets with their per-task switches.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional

from ..__util__ import MissingPropertyError

TASK_NAMES = ("pack", "unpack", "clean")


@dataclass(frozen=True)
class TaskSpec:
    """Switch for a single task of a target.

    Attributes:
        enable: Whether the target takes part in the task
    """

    enable: bool = False


@dataclass(frozen=True)
class TargetConfig:
    """One configured backend instance.

    Attributes:
        type: Runner dispatch key (e.g. "mssql", "elasticsearch")
        name: Optional name, used when generating artifact names
        is_running_in_docker: Whether the backend lives inside a container
        properties: Target specific properties, probed before global ones
        pack: Pack task switch (None means disabled)
        unpack: Unpack/restore task switch (None means disabled)
        clean: Clean task switch (None means disabled)
        name_parts: Overrides the default artifact name template
    """

    type: str
    name: Optional[str] = None
    is_running_in_docker: bool = False
    properties: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    pack: Optional[TaskSpec] = None
    unpack: Optional[TaskSpec] = None
    clean: Optional[TaskSpec] = None
    name_parts: Optional[tuple[str, ...]] = None

    def is_enabled(self, task: str) -> bool:
        """Return True if the named task ("pack", "unpack", "clean") is enabled."""
        if task not in TASK_NAMES:
            raise ValueError(f"Unknown task: {task}")
        switch = getattr(self, task)
        return switch is not None and switch.enable

    def __str__(self) -> str:
        return f"{self.type}:{self.name}" if self.name else self.type


@dataclass(frozen=True)
class SnapConfig:
    """Root configuration object.

    Attributes:
        name: Disambiguates configurations sharing the same infrastructure
        properties: Global properties, the fallback for every target lookup
        targets: Targets in declaration order
        configuration_directory: Directory the configuration was read from
        configuration_file: File name of the configuration
    """

    name: Optional[str] = None
    properties: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    targets: tuple[TargetConfig, ...] = ()
    configuration_directory: Optional[str] = None
    configuration_file: Optional[str] = None

    def get_property(
        self, target: TargetConfig, key: str, default: Optional[str] = None
    ) -> Optional[str]:
        """Look a property up on the target first, then in the global map."""
        if key in target.properties:
            return target.properties[key]
        return self.properties.get(key, default)

    def require_property(self, target: TargetConfig, key: str) -> str:
        """Like get_property, but a missing value is a configuration error."""
        value = self.get_property(target, key)
        if value is None:
            raise MissingPropertyError(key, target.type)
        return value

    def get_enabled_targets(self, task: str) -> list[TargetConfig]:
        """Targets taking part in the given task, in declaration order."""
        return [t for t in self.targets if t.is_enabled(task)]
