"""Capabilities the release pipeline needs from git and npm.

`Repository` and `NpmClient` satisfy these structurally; tests pass fakes.
"""

from __future__ import annotations

from typing import Protocol

from npm_release.core.result import Result
from npm_release.git.repository import GitError, GitStatus
from npm_release.npm.client import NpmError


class VersionControl(Protocol):
    def current_branch(self) -> Result[str, GitError]: ...

    def status(self) -> Result[GitStatus, GitError]: ...

    def stage_all(self) -> Result[None, GitError]: ...

    def staged_paths(self) -> Result[list[str], GitError]: ...

    def commit(self, message: str, *, no_verify: bool = False) -> Result[None, GitError]: ...

    def tag_exists(self, tag: str) -> Result[bool, GitError]: ...

    def create_annotated_tag(self, tag: str, message: str) -> Result[None, GitError]: ...

    def latest_tag(self) -> Result[str | None, GitError]: ...

    def commits_since(self, tag: str | None) -> Result[list[str], GitError]: ...

    def push_branch(self, remote: str, branch: str) -> Result[None, GitError]: ...

    def push_tags(self, remote: str) -> Result[None, GitError]: ...

    def head_sha(self) -> Result[str, GitError]: ...


class PackageManager(Protocol):
    def pkg_fix(self) -> Result[None, NpmError]: ...

    def clean_install(self) -> Result[None, NpmError]: ...

    def run_tests(self) -> Result[None, NpmError]: ...

    def run_script(self, name: str) -> Result[None, NpmError]: ...

    def set_version(self, version: str) -> Result[None, NpmError]: ...

    def publish(self) -> Result[None, NpmError]: ...

    def publish_to(self, registry: str) -> Result[None, NpmError]: ...

    def view_version(self, name: str) -> Result[str, NpmError]: ...

    def view_metadata(self, name: str) -> Result[str, NpmError]: ...
