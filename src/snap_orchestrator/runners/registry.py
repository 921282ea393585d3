"""Runner registry: maps target types to runner instances.

Built-in runners are registered explicitly. Additional runners are discovered
from the ``snap_orchestrator.runners`` entry-point group, so a separate
package can add a backend with::

    [project.entry-points."snap_orchestrator.runners"]
    redis = "snap_redis:RedisRunner"
"""

import logging
from importlib.metadata import entry_points
from pathlib import Path
from typing import Optional

from ..__util__ import SnapError
from ..config.schema import SnapConfig
from .base import TargetRunner

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "snap_orchestrator.runners"


class UnknownTargetTypeError(SnapError):
    """No runner is registered for a target type."""

    def __init__(self, target_type: str, target=None) -> None:
        self.target_type = target_type
        self.target = target
        where = f" (target '{target}')" if target is not None else ""
        super().__init__(f"Could not find target runner for type '{target_type}'{where}")


class PluginLoadError(SnapError):
    """An entry-point runner could not be loaded."""


def normalize_type(target_type: str) -> str:
    return target_type.strip().lower()


class RunnerRegistry:
    """One runner per type; registering a type again replaces the runner."""

    def __init__(self) -> None:
        self._runners: dict[str, TargetRunner] = {}

    def register(self, target_type: str, runner: TargetRunner) -> None:
        key = normalize_type(target_type)
        if key in self._runners:
            logger.debug("Replacing runner for type %s", key)
        self._runners[key] = runner

    def resolve(self, target_type: str) -> Optional[TargetRunner]:
        """Return the runner for target_type, or None."""
        return self._runners.get(normalize_type(target_type))

    def get(self, target_type: str, target=None) -> TargetRunner:
        """Like resolve, but a missing runner raises UnknownTargetTypeError."""
        runner = self.resolve(target_type)
        if runner is None:
            raise UnknownTargetTypeError(target_type, target)
        return runner

    def types(self) -> list[str]:
        return sorted(self._runners)

    def __contains__(self, target_type: str) -> bool:
        return normalize_type(target_type) in self._runners

    def __len__(self) -> int:
        return len(self._runners)


def builtin_runners() -> list[type[TargetRunner]]:
    """Runner classes shipped with snap-orchestrator."""
    from .elasticsearch import ElasticsearchRunner
    from .mssql import MssqlRunner

    return [MssqlRunner, ElasticsearchRunner]


def load_plugin_runners() -> list[type[TargetRunner]]:
    """Discover runner classes from installed entry points.

    Raises:
        PluginLoadError: If an entry point fails to import or is not a runner
    """
    runners = []
    for ep in entry_points().select(group=ENTRY_POINT_GROUP):
        try:
            runner_class = ep.load()
        except Exception as e:
            raise PluginLoadError(f"Failed to load runner plugin '{ep.name}': {e}") from e

        if not (isinstance(runner_class, type) and issubclass(runner_class, TargetRunner)):
            raise PluginLoadError(
                f"Runner plugin '{ep.name}' ({ep.value}) is not a TargetRunner subclass"
            )
        if not runner_class.type:
            # the entry point name doubles as the type
            runner_class = type(runner_class.__name__, (runner_class,), {"type": ep.name})

        logger.debug("Loaded runner plugin %s from %s", ep.name, ep.value)
        runners.append(runner_class)
    return runners


def create_registry(
    config: SnapConfig,
    artifact_dir: Path | str,
    docker_client=None,
    plugins: bool = True,
) -> RunnerRegistry:
    """Build the registry for a run: built-ins first, then plugins.

    Plugins are registered last, so a plugin may replace a built-in runner.
    """
    registry = RunnerRegistry()
    classes = builtin_runners()
    if plugins:
        classes += load_plugin_runners()

    for runner_class in classes:
        registry.register(
            runner_class.type,
            runner_class(config, artifact_dir, docker_client=docker_client),
        )
    return registry
