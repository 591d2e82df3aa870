"""Git operations used by the release pipeline."""

from .repository import GitError, GitStatus, Repository, StatusEntry, is_missing_hook_failure

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "is_missing_hook_failure",
]
