"""Tests for source-control queries."""

import subprocess
from unittest.mock import patch

import pytest

from snap_orchestrator.core.scm import SourceControlError, current_branch


class TestCurrentBranch:
    """Tests for current_branch."""

    def test_returns_branch(self, tmp_path):
        completed = subprocess.CompletedProcess(
            args=[], returncode=0, stdout="feature/login\n", stderr=""
        )
        with patch("snap_orchestrator.core.scm.subprocess.run", return_value=completed) as mock_run:
            assert current_branch(tmp_path) == "feature/login"

        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "rev-parse", "--abbrev-ref", "HEAD"]
        assert kwargs["cwd"] == str(tmp_path)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SourceControlError, match="does not exist"):
            current_branch(tmp_path / "missing")

    def test_git_error(self, tmp_path):
        completed = subprocess.CompletedProcess(
            args=[], returncode=128, stdout="", stderr="fatal: not a git repository"
        )
        with patch("snap_orchestrator.core.scm.subprocess.run", return_value=completed):
            with pytest.raises(SourceControlError, match="not a git repository"):
                current_branch(tmp_path)

    def test_git_not_installed(self, tmp_path):
        with patch(
            "snap_orchestrator.core.scm.subprocess.run",
            side_effect=FileNotFoundError("git"),
        ):
            with pytest.raises(SourceControlError, match="Could not run git"):
                current_branch(tmp_path)
