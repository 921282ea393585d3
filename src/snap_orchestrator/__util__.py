# pyright: standard

"""snap-orchestrator: snap_orchestrator/__util__.py
Common helpers and the base error types shared among modules.
"""

import os
from pathlib import Path

ARTIFACT_DIR_ENV = "SNAP_ARTIFACT_DIR"
ARTIFACT_DIR_PROPERTY = "ArtifactDirectory"


class SnapError(Exception):
    """Base class for every error raised deliberately by snap-orchestrator."""


class UsageError(SnapError):
    """The requested command line verbs cannot be run."""


class MissingPropertyError(SnapError):
    """A property required by a runner is absent from target and global maps."""

    def __init__(self, key: str, target_type: str) -> None:
        self.key = key
        self.target_type = target_type
        super().__init__(f"Missing property '{key}' in target '{target_type}'")


class BackendError(SnapError):
    """A backend refused or failed a pack, restore or clean request."""


def log_heading(caption: str) -> str:
    """Formatted heading for logging output."""
    return f"--[ {caption} ]--"


def default_artifact_dir() -> Path:
    """Return the per-user artifact store used when nothing else is configured."""
    data_home = os.environ.get("XDG_DATA_HOME")
    base = Path(data_home) if data_home else Path.home() / ".local" / "share"
    return base / "snap"


def resolve_artifact_dir(explicit=None, properties=None) -> Path:
    """Work out where artifacts live and make sure the directory exists.

    Priority: explicit argument, the ``ArtifactDirectory`` global property,
    the ``SNAP_ARTIFACT_DIR`` environment variable, then the XDG default.
    """
    properties = properties or {}
    location = (
        explicit
        or properties.get(ARTIFACT_DIR_PROPERTY)
        or os.environ.get(ARTIFACT_DIR_ENV)
    )
    path = Path(location).expanduser() if location else default_artifact_dir()
    path = path.resolve()
    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    return path
