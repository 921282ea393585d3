# pyright: standard

"""snap-orchestrator: snap_orchestrator/endpoint/local.py
File operations on the host filesystem.
"""

import os
import shutil
from pathlib import Path

from ..__logger__ import logger
from .common import Domain, Endpoint


class LocalEndpoint(Endpoint):
    """The local filesystem domain."""

    domain = Domain.LOCAL

    def get_id(self) -> str:
        """Return an id string to identify this endpoint over multiple runs."""
        return "local"

    def move(self, source: Path | str, destination: Path | str) -> bool:
        """Move a file, replacing the destination.

        Returns:
            False if there was nothing to move, True otherwise
        """
        source, destination = Path(source), Path(destination)
        if not source.is_file():
            logger.debug("Nothing to move, %s does not exist", source)
            return False

        destination.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Moving %s -> %s", source, destination)
        try:
            os.replace(source, destination)
        except OSError:
            # crossing filesystems
            shutil.move(str(source), str(destination))
        return True
