"""Deterministic artifact naming.

An artifact name is assembled from name parts. Literal parts are used as-is,
while derivation keys (ConnectionString, Host, ContainerId, GitRepositoryRoot)
are replaced by values derived from the matching property. The same
configuration and target always yield the same name.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from .. import sanitize_name
from ..config.schema import SnapConfig, TargetConfig
from .connection import parse_connection_string
from .scm import current_branch

logger = logging.getLogger(__name__)

CONNECTION_STRING = "ConnectionString"
HOST = "Host"
CONTAINER_ID = "ContainerId"
GIT_REPOSITORY_ROOT = "GitRepositoryRoot"


def default_name_parts(config: SnapConfig, target: TargetConfig) -> list[Optional[str]]:
    """The name template used when a target does not set nameParts."""
    return [
        config.name,
        target.name,
        target.type,
        CONNECTION_STRING,
        HOST,
        CONTAINER_ID,
        GIT_REPOSITORY_ROOT,
    ]


def _connection_string_parts(value: str, config: SnapConfig, resolver) -> list[str]:
    info = parse_connection_string(value)
    return [p for p in (info.server, info.database) if p]


def _literal_parts(value: str, config: SnapConfig, resolver) -> list[str]:
    return [value.strip()]


def _git_branch_parts(value: str, config: SnapConfig, resolver) -> list[str]:
    repo = Path(value).expanduser()
    if not repo.is_absolute() and config.configuration_directory:
        repo = Path(config.configuration_directory) / repo
    branch = resolver(repo)
    return [branch] if branch else []


DERIVATIONS: dict[str, Callable[..., list[str]]] = {
    CONNECTION_STRING: _connection_string_parts,
    HOST: _literal_parts,
    CONTAINER_ID: _literal_parts,
    GIT_REPOSITORY_ROOT: _git_branch_parts,
}


def _expand_part(
    part: Optional[str],
    config: SnapConfig,
    target: TargetConfig,
    branch_resolver: Callable[[Path], str],
) -> Optional[str]:
    """Turn one name part into its final text, or None to drop it."""
    if not part:
        return None

    if part not in DERIVATIONS:
        return part

    value = config.get_property(target, part)
    if value is None or not value.strip():
        return None

    sub_parts = DERIVATIONS[part](value, config, branch_resolver)
    if not sub_parts:
        return None
    return "-".join(sub_parts)


def generate_unique_name(
    config: SnapConfig,
    target: TargetConfig,
    branch_resolver: Optional[Callable[[Path], str]] = None,
) -> str:
    """Generate the stable artifact name for a target.

    Args:
        config: The loaded configuration (global name and properties)
        target: The target being packed or restored
        branch_resolver: Returns the current branch of a git repository
            (defaults to current_branch)

    Returns:
        Name parts joined with '_', with '/', '\\' and '.' replaced by '_'
    """
    parts = list(target.name_parts) if target.name_parts else default_name_parts(config, target)

    resolver = branch_resolver or current_branch
    expanded = [_expand_part(p, config, target, resolver) for p in parts]
    name = sanitize_name("_".join(p for p in expanded if p is not None))

    logger.debug("Unique name for target %s: %s", target, name)
    return name
