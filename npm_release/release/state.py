from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from npm_release.release.semver import is_valid_version


class ReleaseOutcome(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass
class ReleaseState:
    """Mutable record threaded through every pipeline step.

    `outcome` stays PENDING until the report step finalizes the run.
    """

    timestamp: datetime
    version: str | None = None
    commit_sha: str | None = None
    changes: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    solutions: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    package_info: str | None = None
    registry_urls: list[str] = field(default_factory=list)
    outcome: ReleaseOutcome = ReleaseOutcome.PENDING

    def set_version(self, version: str) -> None:
        if not is_valid_version(version):
            raise ValueError(f"version must be MAJOR.MINOR.PATCH, got {version!r}")
        self.version = version

    def record_issue(self, issue: str, solution: str | None = None) -> None:
        self.issues.append(issue)
        if solution is not None:
            self.solutions.append(solution)

    @property
    def all_issues(self) -> list[str]:
        """Hard errors first, then recorded issues, then plain warnings."""
        return [*self.errors, *self.issues, *self.warnings]

    def finalize(self, *, failed: bool) -> None:
        self.outcome = ReleaseOutcome.FAILED if failed else ReleaseOutcome.COMPLETED
