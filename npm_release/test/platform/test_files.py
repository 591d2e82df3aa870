from __future__ import annotations

import os
from pathlib import Path

import pytest

from npm_release.platform.files import atomic_write_text, read_text_if_exists


def test_atomic_write_text_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "docs" / "report.md"
    atomic_write_text(path, "# Release Report\n")

    assert path.read_text(encoding="utf-8") == "# Release Report\n"


def test_atomic_write_text_replaces_existing_content(tmp_path: Path) -> None:
    path = tmp_path / "CHANGELOG.md"
    path.write_text("old", encoding="utf-8")

    atomic_write_text(path, "new")

    assert path.read_text(encoding="utf-8") == "new"


def test_atomic_write_text_cleans_temp_file_on_replace_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    path = tmp_path / "report.md"

    def fail_replace(_src: Path, _dst: Path) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write_text(path, "payload")

    assert list(tmp_path.iterdir()) == []


def test_read_text_if_exists(tmp_path: Path) -> None:
    path = tmp_path / ".npmrc"
    assert read_text_if_exists(path) is None

    path.write_text("@acme:registry=https://npm.pkg.github.com\n", encoding="utf-8")
    assert read_text_if_exists(path) == "@acme:registry=https://npm.pkg.github.com\n"


def test_read_text_if_exists_propagates_other_errors(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        read_text_if_exists(tmp_path)
