"""Git repository abstraction.

This module provides the Repository class covering the git operations a
release needs. All operations return Result types for proper error handling.

Usage:
    repo = Repository(Path("/path/to/package"))

    match repo.tag_exists("v1.2.3"):
        case Ok(True):
            print("already released")
        case Ok(False):
            print("new release")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from npm_release.core.result import Err, Ok, Result
from npm_release.platform.process import ProcessError
from npm_release.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# Output of the hook script that `pre-commit install` writes when the
# pre-commit executable is not on PATH (or the virtualenv is not active).
_MISSING_HOOK_MARKERS = (
    "`pre-commit` not found",
    "pre-commit not found",
    "pre-commit: not found",
    "pre-commit: command not found",
    "no such file or directory: pre-commit",
)

GitErrorKind = Literal["failed", "hook_missing"]

__all__ = [
    "GitError",
    "GitErrorKind",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "is_missing_hook_failure",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
        kind: "hook_missing" when a commit was rejected because the
            pre-commit hook could not run, else "failed"
    """

    command: str
    message: str
    returncode: int = 1
    kind: GitErrorKind = "failed"


def is_missing_hook_failure(output: str) -> bool:
    """Return True if commit output shows the pre-commit hook could not run.

    git reports hook failures only as a non-zero exit, so this matches the
    text printed by the hook script installed by `pre-commit install`. It is
    a known-fragile boundary: when a future pre-commit release rewords the
    message, this returns False and the commit failure stays fatal.
    """
    text = output.lower()
    return any(marker.lower() in text for marker in _MISSING_HOOK_MARKERS)


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed `git status --porcelain=v1`."""

    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        """True if working tree has no changes (untracked files included)."""
        return len(self.entries) == 0

    @property
    def paths(self) -> list[str]:
        return [e.path for e in self.entries]

    def without(self, path: str) -> GitStatus:
        """Status with the entries for `path` dropped."""
        target = Path(path)
        return GitStatus(tuple(e for e in self.entries if Path(e.path) != target))


class Repository:
    """Git repository abstraction for a single package checkout.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def current_branch(self) -> Result[str, GitError]:
        """Get current branch name. A detached HEAD is an error."""
        result = self._git(["rev-parse", "--abbrev-ref", "HEAD"], "rev-parse")
        if isinstance(result, Err):
            return result
        branch = result.value.strip()
        if branch == "HEAD":
            return Err(GitError(command="rev-parse", message="detached HEAD"))
        return Ok(branch)

    def status(self) -> Result[GitStatus, GitError]:
        """Get repository status, listing untracked files one by one.."""
        result = self._git(["status", "--porcelain=v1", "--untracked-files=all"], "status")
        if isinstance(result, Err):
            return result
        return Ok(_parse_status(result.value))

    def stage_all(self) -> Result[None, GitError]:
        """Stage every change in the working tree (`git add -A`)."""
        return self._git(["add", "-A"], "add").map(lambda _: None)

    def staged_paths(self) -> Result[list[str], GitError]:
        """Paths currently staged for commit."""
        result = self._git(["diff", "--cached", "--name-only"], "diff --cached")
        if isinstance(result, Err):
            return result
        return Ok(_lines(result.value))

    def commit(self, message: str, *, no_verify: bool = False) -> Result[None, GitError]:
        """Commit staged changes.

        Returns Err with kind "hook_missing" when the pre-commit hook could
        not run (see is_missing_hook_failure).
        """
        args = ["commit", "-m", message]
        if no_verify:
            args.insert(1, "--no-verify")
        result = self._run(args)
        if isinstance(result, Ok):
            return Ok(None)

        e = result.error
        kind: GitErrorKind = "hook_missing" if is_missing_hook_failure(e.output) else "failed"
        return Err(
            GitError(
                command="commit",
                message=e.output or "git commit failed",
                returncode=e.returncode,
                kind=kind,
            )
        )

    def tag_exists(self, tag: str) -> Result[bool, GitError]:
        """Check whether a tag with exactly this name exists locally."""
        result = self._git(["tag", "--list", tag], "tag --list")
        if isinstance(result, Err):
            return result
        return Ok(tag in _lines(result.value))

    def create_annotated_tag(self, tag: str, message: str) -> Result[None, GitError]:
        return self._git(["tag", "-a", tag, "-m", message], "tag -a").map(lambda _: None)

    def latest_tag(self) -> Result[str | None, GitError]:
        """Most recent tag reachable from HEAD.

        None when the repo has no tags or none of them is an ancestor of HEAD
        (`git describe` exits non-zero in that case).
        """
        tags = self._git(["tag", "--list"], "tag --list")
        if isinstance(tags, Err):
            return tags
        if not _lines(tags.value):
            return Ok(None)

        result = self._git(["describe", "--tags", "--abbrev=0"], "describe")
        if isinstance(result, Err):
            return Ok(None)
        return Ok(result.value.strip() or None)

    def commits_since(self, tag: str | None) -> Result[list[str], GitError]:
        """One-line commit summaries in `tag..HEAD` (all of HEAD when tag is None)."""
        rev = f"{tag}..HEAD" if tag else "HEAD"
        result = self._git(["log", "--oneline", rev], "log")
        if isinstance(result, Err):
            return result
        return Ok(_lines(result.value))

    def push_branch(self, remote: str, branch: str) -> Result[None, GitError]:
        return self._git(["push", remote, branch], "push").map(lambda _: None)

    def push_tags(self, remote: str) -> Result[None, GitError]:
        return self._git(["push", remote, "--tags"], "push --tags").map(lambda _: None)

    def head_sha(self) -> Result[str, GitError]:
        result = self._git(["rev-parse", "HEAD"], "rev-parse HEAD")
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def _git(self, args: list[str], label: str) -> Result[str, GitError]:
        """Run git and convert a ProcessError into a GitError."""
        result = self._run(args)
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command=label,
                    message=e.stderr.strip() or e.stdout.strip() or f"git {label} failed",
                    returncode=e.returncode,
                )
            )
        return Ok(result.value)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)


def _lines(output: str) -> list[str]:
    return [ln.strip() for ln in output.splitlines() if ln.strip()]


def _parse_status(output: str) -> GitStatus:
    """Parse git status --porcelain=v1 output."""
    entries: list[StatusEntry] = []
    for line in output.splitlines():
        if len(line) < 4:
            continue
        entries.append(StatusEntry(xy=line[:2], path=line[3:]))
    return GitStatus(tuple(entries))
