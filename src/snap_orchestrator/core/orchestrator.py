"""Task orchestration: turn the requested verbs into passes over the targets.

Passes run in a fixed order, clean, then unpack, then pack, so that wiping an
environment and repopulating it from a snapshot can be requested at once.
Targets are processed one at a time in configuration order; the first failure
aborts the run.
"""

import enum
import logging
import time
from pathlib import Path
from typing import NamedTuple, Optional

from filelock import FileLock, Timeout

from .. import __util__
from ..__util__ import SnapError, UsageError
from ..config.schema import SnapConfig, TargetConfig
from ..runners.base import TargetRunner
from ..runners.registry import RunnerRegistry

logger = logging.getLogger(__name__)


class Verb(enum.Flag):
    """Verbs requested on the command line."""

    NONE = 0
    PACK = enum.auto()
    UNPACK = enum.auto()
    CLEAN = enum.auto()
    HELP = enum.auto()


class Pass(NamedTuple):
    verb: Verb
    task: str
    operation: str


# Order matters: a clean-then-restore request must clean first.
PASSES = (
    Pass(Verb.CLEAN, "clean", "clean"),
    Pass(Verb.UNPACK, "unpack", "restore"),
    Pass(Verb.PACK, "pack", "pack"),
)


class TargetTaskError(SnapError):
    """A runner failed while working on a target."""

    def __init__(self, target: TargetConfig, task: str, artifact: Optional[str], cause: BaseException) -> None:
        self.target = target
        self.task = task
        self.artifact = artifact
        artifact_note = f" (artifact '{artifact}')" if artifact else ""
        super().__init__(f"Task '{task}' failed for target '{target}'{artifact_note}: {cause}")


class Step(NamedTuple):
    """One runner call planned for a target."""

    task: str
    operation: str
    target: TargetConfig
    runner: TargetRunner


def parse_verbs(pack: bool = False, unpack: bool = False, clean: bool = False, help: bool = False) -> Verb:
    """Combine the requested verbs, rejecting illegal combinations.

    Help wins over everything else. Pack cannot be combined with unpack or
    clean; unpack and clean can be combined.

    Raises:
        UsageError: If no verb was requested or pack is mixed with the others
    """
    if help:
        return Verb.HELP

    if not (pack or unpack or clean):
        raise UsageError("No command to run.")

    if pack and (unpack or clean):
        raise UsageError("Cannot use the 'pack' command with 'clean' or 'unpack' commands.")

    verbs = Verb.NONE
    if pack:
        verbs |= Verb.PACK
    if unpack:
        verbs |= Verb.UNPACK
    if clean:
        verbs |= Verb.CLEAN
    return verbs


class Orchestrator:
    """Runs the clean, unpack and pack passes for one configuration."""

    def __init__(
        self,
        config: SnapConfig,
        registry: RunnerRegistry,
        lock_path: Optional[Path | str] = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.lock_path = Path(lock_path) if lock_path else None

    def plan(self, verbs: Verb) -> list[Step]:
        """Work out every runner call for the requested verbs, in order.

        Every enabled target must have a runner, otherwise nothing runs.

        Raises:
            UnknownTargetTypeError: For the first target without a runner
        """
        steps = []
        for current in PASSES:
            if not verbs & current.verb:
                continue
            for target in self.config.get_enabled_targets(current.task):
                runner = self.registry.get(target.type, target)
                steps.append(Step(current.task, current.operation, target, runner))
        return steps

    def _artifact_for(self, runner: TargetRunner, target: TargetConfig) -> Optional[str]:
        try:
            return runner.display_name(target)
        except Exception:
            return None

    def execute(self, steps: list[Step]) -> None:
        """Execute planned steps sequentially, stopping at the first failure.

        Raises:
            TargetTaskError: Wrapping whatever the runner raised
        """
        task = None
        for step in steps:
            if step.task != task:
                task = step.task
                logger.info(__util__.log_heading(f"{task.capitalize()} started at {time.ctime()}"))

            logger.info("%s %s ...", step.task.capitalize(), step.target)
            try:
                getattr(step.runner, step.operation)(step.target)
            except Exception as e:
                raise TargetTaskError(
                    step.target, step.task, self._artifact_for(step.runner, step.target), e
                ) from e

    def run(self, verbs: Verb) -> int:
        """Run the passes for verbs. Returns the number of target tasks executed.

        Help requests do nothing here; printing usage is the caller's job.
        """
        if verbs & Verb.HELP:
            return 0

        steps = self.plan(verbs)
        if not steps:
            logger.warning("No enabled targets for the requested command")
            return 0

        if self.lock_path is None:
            self.execute(steps)
        else:
            try:
                with FileLock(self.lock_path, timeout=0):
                    self.execute(steps)
            except Timeout as e:
                raise SnapError(
                    f"Another snap run holds the lock {self.lock_path}"
                ) from e

        logger.info(__util__.log_heading(f"Finished at {time.ctime()}"))
        return len(steps)
