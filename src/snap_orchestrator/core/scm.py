"""Source-control queries used when naming artifacts."""

import logging
import subprocess
from pathlib import Path

from ..__util__ import SnapError

logger = logging.getLogger(__name__)


class SourceControlError(SnapError):
    """A git query failed."""


def _run_git(args: list[str], cwd: Path) -> subprocess.CompletedProcess:
    """Run a git command within the given repository."""
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise SourceControlError(f"Could not run git in '{cwd}': {e}") from e


def current_branch(repo_path: str | Path) -> str:
    """Return the checked-out branch name of the repository at repo_path.

    Raises:
        SourceControlError: If repo_path is not a git work tree or git fails
    """
    repo = Path(repo_path).expanduser()
    if not repo.is_dir():
        raise SourceControlError(f"Git repository root does not exist: '{repo}'")

    result = _run_git(["rev-parse", "--abbrev-ref", "HEAD"], repo)
    if result.returncode != 0:
        raise SourceControlError(
            f"git rev-parse failed in '{repo}': {result.stderr.strip()}"
        )

    branch = result.stdout.strip()
    logger.debug("Current branch of %s: %s", repo, branch)
    return branch
