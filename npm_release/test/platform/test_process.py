"""Tests for npm_release.platform.process module."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from npm_release.core.result import Err, Ok
from npm_release.platform.process import ProcessError, run, run_live

PY = sys.executable


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_output_combines_streams(self) -> None:
        error = ProcessError(("git",), 1, stdout=" hint \n", stderr="fatal: x\n")
        assert error.output == "fatal: x\nhint"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    """Test run function."""

    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; sys.stderr.write('error msg'); sys.exit(42)"], cwd=tmp_path
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert "error msg" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert len(result.error.stderr) > 0

    def test_uses_env(self, tmp_path: Path) -> None:
        env = os.environ.copy()
        env["NPM_RELEASE_TEST_VAR"] = "test_value"

        result = run(
            [PY, "-c", "import os; print(os.environ.get('NPM_RELEASE_TEST_VAR', ''))"],
            cwd=tmp_path,
            env=env,
        )

        assert isinstance(result, Ok)
        assert "test_value" in result.value

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.1)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr.lower()


class TestRunLive:
    def test_success(self, tmp_path: Path) -> None:
        result = run_live([PY, "-c", "pass"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert result.value is None

    def test_failure_keeps_exit_code(self, tmp_path: Path) -> None:
        result = run_live([PY, "-c", "import sys; sys.exit(3)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert result.error.output == ""

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run_live(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
