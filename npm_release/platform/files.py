"""Filesystem helpers for the release artifacts (changelog, report, npmrc)."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "read_text_if_exists"]


def read_text_if_exists(path: Path, *, encoding: str = "utf-8") -> str | None:
    """Return the file content, or None when the file does not exist.

    Other OSErrors (permissions, directories) propagate.
    """
    try:
        return path.read_text(encoding=encoding)
    except FileNotFoundError:
        return None


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace.

    Readers never observe a half-written changelog or report.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
