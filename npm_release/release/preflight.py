"""Read-only release readiness check.

Answers "would `npm-release run` get past its preconditions?" without
touching the working tree, the manifest or any registry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from npm_release.core.config import ReleaseConfig
from npm_release.core.result import Err
from npm_release.npm.manifest import read_manifest
from npm_release.release.contracts import VersionControl
from npm_release.release.semver import is_valid_version, tag_for


class CheckStatus(Enum):
    """Status of a check result."""

    OK = auto()
    """Check passed."""

    WARNING = auto()
    """Release can proceed; something is worth knowing."""

    ERROR = auto()
    """Release would fail."""


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result of a single check.

    Attributes:
        name: Short identifier for what was checked (e.g., "branch", "token")
        status: Whether the check passed, warned, or failed
        message: Human-readable result message
        hint: Optional fix command
    """

    name: str
    status: CheckStatus
    message: str
    hint: str | None = None

    @property
    def is_error(self) -> bool:
        return self.status == CheckStatus.ERROR

    @classmethod
    def success(cls, name: str, message: str) -> CheckResult:
        return cls(name=name, status=CheckStatus.OK, message=message)

    @classmethod
    def warning(cls, name: str, message: str, hint: str | None = None) -> CheckResult:
        return cls(name=name, status=CheckStatus.WARNING, message=message, hint=hint)

    @classmethod
    def error(cls, name: str, message: str, hint: str | None = None) -> CheckResult:
        return cls(name=name, status=CheckStatus.ERROR, message=message, hint=hint)


def has_errors(results: list[CheckResult]) -> bool:
    return any(r.is_error for r in results)


def run_preflight(
    *,
    root: Path,
    config: ReleaseConfig,
    git: VersionControl,
    env: Mapping[str, str],
) -> list[CheckResult]:
    """Check token, branch, working tree, manifest version and release tag."""
    results: list[CheckResult] = []
    token_env = config.registry.token_env

    if env.get(token_env, "").strip():
        results.append(CheckResult.success("token", f"{token_env} is set"))
    else:
        results.append(
            CheckResult.error(
                "token", f"{token_env} is not set", hint=f"export {token_env} or add it to .env"
            )
        )

    branch = git.current_branch()
    if isinstance(branch, Err):
        results.append(CheckResult.error("branch", branch.error.message))
    elif branch.value != config.branch:
        results.append(
            CheckResult.error(
                "branch",
                f"on '{branch.value}', releases run from '{config.branch}'",
                hint=f"git checkout {config.branch}",
            )
        )
    else:
        results.append(CheckResult.success("branch", branch.value))

    status = git.status()
    if isinstance(status, Err):
        results.append(CheckResult.error("working tree", status.error.message))
    else:
        changes = status.value.without(config.files.report)
        if changes.is_clean:
            results.append(CheckResult.success("working tree", "clean"))
        else:
            results.append(
                CheckResult.error(
                    "working tree",
                    f"{len(changes.entries)} uncommitted change(s)",
                    hint='git add -A && git commit -m "<message>"',
                )
            )

    manifest = read_manifest(root / config.files.manifest)
    if isinstance(manifest, Err):
        results.append(CheckResult.error("version", manifest.error.message))
        return results

    version = manifest.value.version
    if not is_valid_version(version):
        results.append(CheckResult.error("version", f"'{version}' is not MAJOR.MINOR.PATCH"))
        return results
    assert version is not None
    results.append(CheckResult.success("version", version))

    tag = tag_for(version)
    exists = git.tag_exists(tag)
    if isinstance(exists, Err):
        results.append(CheckResult.error("tag", exists.error.message))
    elif exists.value:
        results.append(CheckResult.warning("tag", f"{tag} exists; the release reuses {version}"))
    else:
        results.append(CheckResult.success("tag", f"{tag} not yet created"))

    return results
