"""Tests for git/repository.py."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from npm_release.core.result import Err, Ok
from npm_release.git.repository import (
    GitStatus,
    Repository,
    StatusEntry,
    is_missing_hook_failure,
)


def make_completed_process(
    returncode: int = 0, stdout: str = "", stderr: str = ""
) -> subprocess.CompletedProcess[str]:
    """Create a mock CompletedProcess."""
    return subprocess.CompletedProcess(
        args=["git"], returncode=returncode, stdout=stdout, stderr=stderr
    )


def git_args(mock_run: MagicMock, call: int = -1) -> list[str]:
    """Arguments after `git -C <path>` of a recorded call."""
    cmd = mock_run.call_args_list[call].args[0]
    return cmd[3:]


# =============================================================================
# Hook detection
# =============================================================================


class TestIsMissingHookFailure:
    @pytest.mark.parametrize(
        "output",
        [
            "`pre-commit` not found.  Did you forget to activate your virtualenv?",
            ".git/hooks/pre-commit: line 12: pre-commit: command not found",
            "env: pre-commit: No such file or directory: pre-commit",
        ],
    )
    def test_matches_hook_script_output(self, output: str) -> None:
        assert is_missing_hook_failure(output) is True

    @pytest.mark.parametrize(
        "output",
        [
            "ruff....................................................Failed",
            "nothing to commit, working tree clean",
            "",
        ],
    )
    def test_other_failures(self, output: str) -> None:
        assert is_missing_hook_failure(output) is False


# =============================================================================
# Status parsing
# =============================================================================


class TestGitStatus:
    def test_clean(self) -> None:
        assert GitStatus().is_clean is True

    def test_paths(self) -> None:
        status = GitStatus((StatusEntry(xy=" M", path="a.js"), StatusEntry(xy="??", path="b.js")))
        assert status.is_clean is False
        assert status.paths == ["a.js", "b.js"]

    def test_without(self) -> None:
        status = GitStatus(
            (StatusEntry(xy="??", path="report.md"), StatusEntry(xy=" M", path="a.js"))
        )
        assert status.without("report.md").paths == ["a.js"]
        assert status.without("./report.md").paths == ["a.js"]
        assert status.without("a.js").without("report.md").is_clean is True

    def test_without_keeps_same_name_elsewhere(self) -> None:
        status = GitStatus((StatusEntry(xy="??", path="docs/report.md"),))
        assert status.without("report.md").paths == ["docs/report.md"]


# =============================================================================
# Repository Tests - Mocked subprocess
# =============================================================================


class TestRepository:
    """Tests for Repository class."""

    @patch("subprocess.run")
    def test_current_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="master\n")

        result = Repository(tmp_path).current_branch()

        assert isinstance(result, Ok)
        assert result.value == "master"
        assert git_args(mock_run) == ["rev-parse", "--abbrev-ref", "HEAD"]

    @patch("subprocess.run")
    def test_detached_head_is_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="HEAD\n")

        result = Repository(tmp_path).current_branch()

        assert isinstance(result, Err)
        assert "detached" in result.error.message

    @patch("subprocess.run")
    def test_status_with_changes(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stdout="M  staged.js\n M unstaged.js\n?? new.js\n"
        )

        result = Repository(tmp_path).status()

        assert isinstance(result, Ok)
        assert result.value.paths == ["staged.js", "unstaged.js", "new.js"]
        assert git_args(mock_run) == ["status", "--porcelain=v1", "--untracked-files=all"]

    @patch("subprocess.run")
    def test_status_clean(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="")

        result = Repository(tmp_path).status()

        assert isinstance(result, Ok)
        assert result.value.is_clean is True

    @patch("subprocess.run")
    def test_status_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=128, stderr="fatal: not a git repository\n"
        )

        result = Repository(tmp_path).status()

        assert isinstance(result, Err)
        assert result.error.message == "fatal: not a git repository"
        assert result.error.returncode == 128

    @patch("subprocess.run")
    def test_staged_paths(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="CHANGELOG.md\npackage.json\n")

        result = Repository(tmp_path).staged_paths()

        assert isinstance(result, Ok)
        assert result.value == ["CHANGELOG.md", "package.json"]
        assert git_args(mock_run) == ["diff", "--cached", "--name-only"]

    @patch("subprocess.run")
    def test_commit(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        result = Repository(tmp_path).commit("chore(release): v1.0.1")

        assert isinstance(result, Ok)
        assert git_args(mock_run) == ["commit", "-m", "chore(release): v1.0.1"]

    @patch("subprocess.run")
    def test_commit_no_verify(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        Repository(tmp_path).commit("msg", no_verify=True)

        assert git_args(mock_run) == ["commit", "--no-verify", "-m", "msg"]

    @patch("subprocess.run")
    def test_commit_missing_hook(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=1,
            stdout="`pre-commit` not found.  Did you forget to activate your virtualenv?\n",
        )

        result = Repository(tmp_path).commit("msg")

        assert isinstance(result, Err)
        assert result.error.kind == "hook_missing"

    @patch("subprocess.run")
    def test_commit_other_failure(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=1, stderr="fatal: unable to create index.lock\n"
        )

        result = Repository(tmp_path).commit("msg")

        assert isinstance(result, Err)
        assert result.error.kind == "failed"
        assert "index.lock" in result.error.message

    @patch("subprocess.run")
    def test_tag_exists(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="v1.0.1\n")

        result = Repository(tmp_path).tag_exists("v1.0.1")

        assert isinstance(result, Ok)
        assert result.value is True
        assert git_args(mock_run) == ["tag", "--list", "v1.0.1"]

    @patch("subprocess.run")
    def test_tag_missing(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="")

        result = Repository(tmp_path).tag_exists("v1.0.1")

        assert isinstance(result, Ok)
        assert result.value is False

    @patch("subprocess.run")
    def test_create_annotated_tag(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        result = Repository(tmp_path).create_annotated_tag("v1.0.1", "Release v1.0.1")

        assert isinstance(result, Ok)
        assert git_args(mock_run) == ["tag", "-a", "v1.0.1", "-m", "Release v1.0.1"]

    @patch("subprocess.run")
    def test_latest_tag_without_tags(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="")

        result = Repository(tmp_path).latest_tag()

        assert isinstance(result, Ok)
        assert result.value is None
        assert mock_run.call_count == 1

    @patch("subprocess.run")
    def test_latest_tag(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = [
            make_completed_process(stdout="v1.0.0\nv1.0.1\n"),
            make_completed_process(stdout="v1.0.1\n"),
        ]

        result = Repository(tmp_path).latest_tag()

        assert isinstance(result, Ok)
        assert result.value == "v1.0.1"
        assert git_args(mock_run) == ["describe", "--tags", "--abbrev=0"]

    @patch("subprocess.run")
    def test_latest_tag_not_reachable(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = [
            make_completed_process(stdout="v0.9.0\n"),
            make_completed_process(
                returncode=128, stderr="fatal: No tags can describe '0123abcd'.\n"
            ),
        ]

        result = Repository(tmp_path).latest_tag()

        assert isinstance(result, Ok)
        assert result.value is None
        assert mock_run.call_count == 2

    @patch("subprocess.run")
    def test_latest_tag_listing_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=128, stderr="fatal: not a git repository\n"
        )

        result = Repository(tmp_path).latest_tag()

        assert isinstance(result, Err)
        assert result.error.command == "tag --list"

    @patch("subprocess.run")
    def test_commits_since_tag(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="a1b2c3d feat: x\nd4e5f6a fix: y\n")

        result = Repository(tmp_path).commits_since("v1.0.0")

        assert isinstance(result, Ok)
        assert result.value == ["a1b2c3d feat: x", "d4e5f6a fix: y"]
        assert git_args(mock_run) == ["log", "--oneline", "v1.0.0..HEAD"]

    @patch("subprocess.run")
    def test_commits_since_start(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="a1b2c3d initial\n")

        Repository(tmp_path).commits_since(None)

        assert git_args(mock_run) == ["log", "--oneline", "HEAD"]

    @patch("subprocess.run")
    def test_push_uses_network_timeout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        repo = Repository(tmp_path)
        repo.push_branch("origin", "master")
        repo.push_tags("origin")

        assert git_args(mock_run, 0) == ["push", "origin", "master"]
        assert git_args(mock_run, 1) == ["push", "origin", "--tags"]
        assert mock_run.call_args_list[0].kwargs["timeout"] == 180.0

    @patch("subprocess.run")
    def test_push_rejected(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=1, stderr="! [rejected] master -> master (fetch first)\n"
        )

        result = Repository(tmp_path).push_branch("origin", "master")

        assert isinstance(result, Err)
        assert "rejected" in result.error.message

    @patch("subprocess.run")
    def test_head_sha(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="0123abcd\n")

        result = Repository(tmp_path).head_sha()

        assert isinstance(result, Ok)
        assert result.value == "0123abcd"
