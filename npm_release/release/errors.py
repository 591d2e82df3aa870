"""Hard-failure payloads for the release pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from npm_release.core.errors import ErrorCode

ReleaseErrorKind = Literal[
    "wrong_branch",
    "dirty_tree",
    "invalid_version",
    "manifest_invalid",
    "git_failed",
    "install_failed",
    "build_failed",
    "version_bump_failed",
    "changelog_failed",
    "commit_failed",
    "tag_failed",
    "push_failed",
    "token_missing",
    "publish_failed",
    "verify_timeout",
    "version_mismatch",
    "report_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """A hard failure: the pipeline stops after the step that produced it."""

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None


def release_error_code(kind: ReleaseErrorKind) -> ErrorCode:
    """Map a hard-failure kind to the CLI exit code."""
    if kind in {"wrong_branch", "dirty_tree", "invalid_version"}:
        return ErrorCode.USER_ERROR
    if kind in {"token_missing"}:
        return ErrorCode.ENV_ERROR
    if kind in {"install_failed", "build_failed"}:
        return ErrorCode.BUILD_ERROR
    if kind in {"push_failed", "publish_failed", "verify_timeout", "version_mismatch"}:
        return ErrorCode.NETWORK_ERROR
    if kind in {"manifest_invalid", "changelog_failed", "report_failed"}:
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR
