"""Run command: execute the requested passes over the configured targets."""

import argparse
import logging
import time

from .. import __util__
from ..__util__ import SnapError
from ..config import find_config_file, load_config
from ..core.orchestrator import Orchestrator, Step, Verb
from ..runners import create_registry

logger = logging.getLogger(__name__)

LOCK_NAME = ".snap.lock"


def execute_run(args: argparse.Namespace, verbs: Verb) -> int:
    """Execute the run command.

    Args:
        args: Parsed command line arguments
        verbs: Verbs to run (never HELP)

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        config_path = find_config_file(getattr(args, "config", None))
        logger.info("Loading configuration from: %s", config_path)
        config, warnings = load_config(config_path)

        for warning in warnings:
            logger.warning("Config: %s", warning)

        artifact_dir = __util__.resolve_artifact_dir(
            getattr(args, "artifact_dir", None), config.properties
        )
        logger.debug("Artifact directory: %s", artifact_dir)

        registry = create_registry(config, artifact_dir)
        orchestrator = Orchestrator(config, registry, lock_path=artifact_dir / LOCK_NAME)

        if getattr(args, "dry_run", False):
            return _dry_run(orchestrator.plan(verbs))

        logger.info(__util__.log_heading(f"Started at {time.ctime()}"))
        count = orchestrator.run(verbs)

    except SnapError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
    except Exception:
        logger.exception("Unexpected error")
        return 1

    logger.info("Completed %d target task(s)", count)
    return 0


def _dry_run(steps: list[Step]) -> int:
    """Show what would be done without running any target."""
    print("Dry run mode - showing what would be done:")
    print("")

    if not steps:
        print("  (no enabled targets)")
        return 0

    task = None
    for step in steps:
        if step.task != task:
            task = step.task
            print(f"{task.capitalize()}:")
        runner_name = type(step.runner).__name__
        if step.task == "clean":
            print(f"  {step.target} ({runner_name})")
        else:
            print(f"  {step.target} ({runner_name}) -> {step.runner.display_name(step.target)}")
    print("")
    return 0
