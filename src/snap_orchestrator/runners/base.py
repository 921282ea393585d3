"""Base class for target runners.

A runner implements pack, restore and clean for one kind of backend. The
backend writes artifacts to its own storage; the runner then relocates them
into the artifact store (or back) through the storage bridge.
"""

import logging
import shutil
from pathlib import Path, PurePath, PurePosixPath
from typing import Optional

from ..config.schema import SnapConfig, TargetConfig
from ..core.naming import CONTAINER_ID, generate_unique_name
from ..endpoint import Domain, TransferError, move_virtual

logger = logging.getLogger(__name__)


class TargetRunner:
    """Handles pack, restore and clean for every target of one type.

    Subclasses set ``type`` and override the operations they support; the
    others raise NotImplementedError.
    """

    type: str = ""
    artifact_suffix: str = ""

    def __init__(self, config: SnapConfig, artifact_dir: Path | str, docker_client=None) -> None:
        self.config = config
        self.artifact_dir = Path(artifact_dir)
        self.docker_client = docker_client

    def pack(self, target: TargetConfig) -> None:
        raise NotImplementedError(f"Runner '{self.type}' does not support pack")

    def restore(self, target: TargetConfig) -> None:
        raise NotImplementedError(f"Runner '{self.type}' does not support restore")

    def clean(self, target: TargetConfig) -> None:
        raise NotImplementedError(f"Runner '{self.type}' does not support clean")

    def artifact_name(self, target: TargetConfig) -> str:
        """Unique artifact file name for target, with the runner's suffix."""
        return generate_unique_name(self.config, target) + self.artifact_suffix

    def display_name(self, target: TargetConfig) -> str:
        """Name of the artifact as the backend stores it."""
        return self.artifact_name(target)

    def artifact_path(self, name: str) -> Path:
        """Location of an artifact in the local artifact store."""
        return self.artifact_dir / name

    def backend_path(self, target: TargetConfig, directory: str, name: str) -> PurePath:
        """Join a path on the backend's side (POSIX inside containers)."""
        if target.is_running_in_docker:
            return PurePosixPath(directory) / name
        return Path(directory) / name

    def fetch_artifact(
        self, target: TargetConfig, backend_file: PurePath, name: str
    ) -> Optional[Path]:
        """Move an artifact from backend storage into the artifact store.

        Returns:
            The stored artifact, or None when the backend left no file behind
        """
        destination = self.artifact_path(name)
        if target.is_running_in_docker:
            move_virtual(
                backend_file,
                Domain.CONTAINER,
                destination,
                Domain.LOCAL,
                self.config.require_property(target, CONTAINER_ID),
                client=self.docker_client,
            )
        elif not move_virtual(backend_file, Domain.LOCAL, destination, Domain.LOCAL):
            logger.warning("Backend produced no file at %s", backend_file)
            return None
        return destination

    def deliver_artifact(self, target: TargetConfig, backend_file: PurePath, name: str) -> None:
        """Put an artifact from the artifact store where the backend reads it."""
        source = self.artifact_path(name)
        if target.is_running_in_docker:
            move_virtual(
                source,
                Domain.LOCAL,
                backend_file,
                Domain.CONTAINER,
                self.config.require_property(target, CONTAINER_ID),
                client=self.docker_client,
            )
        else:
            if not source.is_file():
                raise TransferError(f"No artifact to restore at {source}")
            # the stored artifact stays so the same snapshot can be restored again
            Path(backend_file).parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, backend_file)
