# pyright: standard

"""snap-orchestrator: snap_orchestrator/endpoint/common.py
Common functionality among endpoints.
"""

import enum

from ..__util__ import SnapError


class Domain(enum.Enum):
    """Storage namespaces an artifact can live in."""

    LOCAL = "local"
    CONTAINER = "container"


class TransferError(SnapError):
    """Moving an artifact between domains failed."""


class ContainerResolutionError(SnapError):
    """A container id or name fragment did not match exactly one container."""


class Endpoint:
    """Generic structure of a storage endpoint."""

    domain: Domain

    def __init__(self, config=None, **kwargs) -> None:
        """
        Initialize the Endpoint with a configuration dictionary.

        Args:
            config (dict): Configuration dictionary containing endpoint settings.
            kwargs: Additional settings, merged over config.
        """
        self.config = dict(config or {})
        for key, value in kwargs.items():
            self.config[key] = value

    def get_id(self) -> str:
        """Return an id string to identify this endpoint over multiple runs."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_id()!r})"
