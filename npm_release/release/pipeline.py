"""Release pipeline orchestrator.

Runs the release steps in a fixed order against one package checkout:

    verify -> install/test -> build -> version -> changelog -> commit/tag
    -> push -> publish -> publish (secondary) -> verify registry -> report

A step returns Err(ReleaseError) for a hard failure, which skips every
remaining step except the report. Soft failures stay inside their step as
issues, solutions and warnings on the ReleaseState. The report is written on
every exit path, exceptions included.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path

from npm_release.core.config import ReleaseConfig
from npm_release.core.result import Err, Ok, Result
from npm_release.npm.client import NpmError
from npm_release.npm.manifest import Manifest, read_manifest
from npm_release.output.console import ConsoleProtocol, Style
from npm_release.platform.files import atomic_write_text, read_text_if_exists
from npm_release.release import changelog
from npm_release.release.contracts import PackageManager, VersionControl
from npm_release.release.errors import ReleaseError, ReleaseErrorKind
from npm_release.release.report import write_report
from npm_release.release.retry import retry_until
from npm_release.release.semver import ReleaseKind, is_valid_version, parse_version, tag_for
from npm_release.release.state import ReleaseState

TESTS_ISSUE = "Tests not configured or failing"
TESTS_SOLUTION = "Add or fix tests before the next release"
HOOKS_ISSUE = "Pre-commit hooks were not run"
HOOKS_SOLUTION = "Run the quality hooks manually (pre-commit run --all-files)"

_REDACTED = "***"

StepAction = Callable[[ReleaseState], Result[None, ReleaseError]]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Step:
    title: str
    action: StepAction


class ReleasePipeline:
    """Sequential release of the npm package rooted at `root`.

    Attributes:
        root: Package root (git work tree containing package.json)
    """

    def __init__(
        self,
        *,
        root: Path,
        config: ReleaseConfig,
        console: ConsoleProtocol,
        git: VersionControl,
        npm: PackageManager,
        env: Mapping[str, str],
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.root = root
        self._config = config
        self._console = console
        self._git = git
        self._npm = npm
        self._env = env
        self._sleep = sleep
        self._clock = clock

    @property
    def report_path(self) -> Path:
        return self.root / self._config.files.report

    def steps(self, kind: ReleaseKind) -> list[Step]:
        """The ordered steps before the report."""
        return [
            Step("Pre-verification", self._pre_verification),
            Step("Dependencies and tests", self._dependencies_and_tests),
            Step("Build", self._build),
            Step("Versioning", lambda state: self._versioning(state, kind)),
            Step("Changelog", self._changelog),
            Step("Commit and tag", self._commit_and_tag),
            Step("Push", self._push),
            Step("Publish", self._publish_primary),
            Step("Publish to secondary registry", self._publish_secondary),
            Step("Verification", self._verification),
        ]

    def run(self, kind: ReleaseKind = "patch") -> Result[ReleaseState, ReleaseError]:
        """Run every step, then write the report.

        Returns Ok(state) when no hard failure happened, else the first
        hard failure. Unexpected exceptions propagate after the report is
        written with outcome "failed".
        """
        state = ReleaseState(timestamp=self._clock())
        steps = self.steps(kind)
        total = len(steps) + 1
        failure: ReleaseError | None = None
        finished = False
        report: Result[None, ReleaseError] = Ok(None)

        try:
            for index, step in enumerate(steps, start=1):
                self._console.header(f"[{index}/{total}] {step.title}")
                result = step.action(state)
                if isinstance(result, Err):
                    failure = self._redacted(result.error)
                    self._record_failure(state, failure)
                    break
            finished = True
        except Exception as e:
            state.errors.append(self._redact(f"unexpected error: {e}"))
            raise
        finally:
            self._console.header(f"[{total}/{total}] Report")
            report = self._report(state, failed=bool(state.errors) or not finished)

        if failure is not None:
            return Err(failure)
        if isinstance(report, Err):
            return report

        self._console.success(f"released {state.version} ({state.commit_sha})")
        return Ok(state)

    # -- steps ----------------------------------------------------------------

    def _pre_verification(self, state: ReleaseState) -> Result[None, ReleaseError]:
        branch = self._git.current_branch()
        if isinstance(branch, Err):
            return _git_failed(branch.error.message)
        expected = self._config.branch
        if branch.value != expected:
            return Err(
                ReleaseError(
                    kind="wrong_branch",
                    message=f"current branch is '{branch.value}'; releases run from '{expected}'",
                    hint=f"git checkout {expected}",
                )
            )
        self._console.success(f"branch: {branch.value}")

        status = self._git.status()
        if isinstance(status, Err):
            return _git_failed(status.error.message)
        changes = status.value.without(self._config.files.report)
        if not changes.is_clean:
            paths = changes.paths
            shown = ", ".join(paths[:5]) + (" ..." if len(paths) > 5 else "")
            return Err(
                ReleaseError(
                    kind="dirty_tree",
                    message="working tree has uncommitted changes",
                    hint=f"commit or discard: {shown}",
                )
            )
        self._console.success("working tree clean")

        self._console.print("npm pkg fix", Style.DIM)
        fixed = self._npm.pkg_fix()
        if isinstance(fixed, Err):
            return _npm_failed("manifest_invalid", "npm pkg fix failed", fixed.error)

        manifest = self._read_manifest()
        if isinstance(manifest, Err):
            return manifest
        version = manifest.value.version
        if not is_valid_version(version):
            return Err(
                ReleaseError(
                    kind="invalid_version",
                    message=f"version '{version}' is not MAJOR.MINOR.PATCH",
                    hint=f"fix the version field in {self._config.files.manifest}",
                )
            )
        assert version is not None
        state.set_version(version)
        self._console.success(f"version: {version}")
        return Ok(None)

    def _dependencies_and_tests(self, state: ReleaseState) -> Result[None, ReleaseError]:
        self._console.print("npm ci", Style.DIM)
        installed = self._npm.clean_install()
        if isinstance(installed, Err):
            return _npm_failed("install_failed", "dependency install failed", installed.error)
        self._console.success("dependencies installed")

        self._console.print("npm test", Style.DIM)
        tested = self._npm.run_tests()
        if isinstance(tested, Err):
            self._soft_failure(state, TESTS_ISSUE, TESTS_SOLUTION)
            return Ok(None)
        self._console.success("tests passed")
        return Ok(None)

    def _build(self, state: ReleaseState) -> Result[None, ReleaseError]:
        manifest = self._read_manifest()
        if isinstance(manifest, Err):
            return manifest
        if not manifest.value.has_script("build"):
            self._console.info("no build script defined; skipping")
            return Ok(None)

        self._console.print("npm run build", Style.DIM)
        built = self._npm.run_script("build")
        if isinstance(built, Err):
            return _npm_failed("build_failed", "build failed", built.error)
        self._console.success("build completed")
        return Ok(None)

    def _versioning(self, state: ReleaseState, kind: ReleaseKind) -> Result[None, ReleaseError]:
        manifest = self._read_manifest()
        if isinstance(manifest, Err):
            return manifest
        current = manifest.value.version or ""
        parsed = parse_version(current)
        if parsed is None:
            return Err(
                ReleaseError(
                    kind="invalid_version",
                    message=f"version '{current}' is not MAJOR.MINOR.PATCH",
                )
            )

        exists = self._git.tag_exists(tag_for(current))
        if isinstance(exists, Err):
            return _git_failed(exists.error.message)
        if exists.value:
            state.set_version(current)
            self._console.success(f"tag {tag_for(current)} exists; reusing version {current}")
            return Ok(None)

        target = str(parsed.bump(kind))
        self._console.print(f"npm version {target} --no-git-tag-version", Style.DIM)
        bumped = self._npm.set_version(target)
        if isinstance(bumped, Err):
            message = f"failed to set version {target}"
            return _npm_failed("version_bump_failed", message, bumped.error)

        reread = self._read_manifest()
        if isinstance(reread, Err):
            return reread
        if reread.value.version != target:
            return Err(
                ReleaseError(
                    kind="version_bump_failed",
                    message=(
                        f"{self._config.files.manifest} reports {reread.value.version} "
                        f"after bumping to {target}"
                    ),
                )
            )
        state.set_version(target)
        self._console.success(f"version bumped: {current} -> {target} ({kind})")
        return Ok(None)

    def _changelog(self, state: ReleaseState) -> Result[None, ReleaseError]:
        version = _require_version(state)
        path = self.root / self._config.files.changelog
        try:
            existing = read_text_if_exists(path)
        except OSError as e:
            return _changelog_failed(f"failed to read {path.name}: {e}", path)
        text = existing if existing is not None else changelog.DEFAULT_TITLE

        if changelog.has_entry(text, version):
            self._console.info(f"{path.name} already has a section for {version}; unchanged")
            return Ok(None)

        latest = self._git.latest_tag()
        if isinstance(latest, Err):
            return _git_failed(latest.error.message)
        if latest.value is None:
            self._console.print("no previous tag; using the full history", Style.DIM)

        commits = self._git.commits_since(latest.value)
        if isinstance(commits, Err):
            return _git_failed(commits.error.message)
        changes = changelog.commit_entries(commits.value)

        if not changes:
            staged = self._git.staged_paths()
            if isinstance(staged, Err):
                return _git_failed(staged.error.message)
            changes = changelog.staged_entry(staged.value)

        if not changes:
            since = latest.value or "the start of the history"
            self._warn(state, f"no changes found since {since}")

        state.changes = changes
        entry = changelog.build_entry(version, self._clock().date(), changes)
        try:
            atomic_write_text(path, changelog.insert_entry(text, entry))
        except OSError as e:
            return _changelog_failed(f"failed to write {path.name}: {e}", path)

        self._console.success(f"{path.name} updated ({len(changes)} entries)")
        return Ok(None)

    def _commit_and_tag(self, state: ReleaseState) -> Result[None, ReleaseError]:
        version = _require_version(state)
        tag = tag_for(version)

        self._console.print("git add -A", Style.DIM)
        staged = self._git.stage_all()
        if isinstance(staged, Err):
            return _git_failed(staged.error.message)
        paths = self._git.staged_paths()
        if isinstance(paths, Err):
            return _git_failed(paths.error.message)
        if not paths.value:
            self._console.info("nothing to commit")
            return Ok(None)

        message = f"chore(release): {tag}"
        self._console.print(f"git commit -m {message}", Style.DIM)
        committed = self._git.commit(message)
        if isinstance(committed, Err):
            if committed.error.kind != "hook_missing":
                return Err(
                    ReleaseError(
                        kind="commit_failed",
                        message="git commit failed",
                        hint=committed.error.message,
                    )
                )
            self._soft_failure(state, HOOKS_ISSUE, HOOKS_SOLUTION)
            self._console.print(f"git commit --no-verify -m {message}", Style.DIM)
            retried = self._git.commit(message, no_verify=True)
            if isinstance(retried, Err):
                return Err(
                    ReleaseError(
                        kind="commit_failed",
                        message="git commit --no-verify failed",
                        hint=retried.error.message,
                    )
                )
        self._console.success(f"committed: {message}")

        exists = self._git.tag_exists(tag)
        if isinstance(exists, Err):
            return _git_failed(exists.error.message)
        if exists.value:
            self._console.info(f"tag {tag} already exists; not recreating")
            return Ok(None)

        created = self._git.create_annotated_tag(tag, f"Release {tag}")
        if isinstance(created, Err):
            return Err(
                ReleaseError(
                    kind="tag_failed",
                    message=f"failed to create tag {tag}",
                    hint=created.error.message,
                )
            )
        self._console.success(f"tag created: {tag}")
        return Ok(None)

    def _push(self, state: ReleaseState) -> Result[None, ReleaseError]:
        remote = self._config.remote
        branch = self._config.branch

        self._console.print(f"git push {remote} {branch}", Style.DIM)
        pushed = self._git.push_branch(remote, branch)
        if isinstance(pushed, Err):
            return Err(
                ReleaseError(
                    kind="push_failed",
                    message=f"failed to push {branch} to {remote}",
                    hint=pushed.error.message,
                )
            )

        self._console.print(f"git push {remote} --tags", Style.DIM)
        tags = self._git.push_tags(remote)
        if isinstance(tags, Err):
            return Err(
                ReleaseError(
                    kind="push_failed",
                    message=f"failed to push tags to {remote}",
                    hint=tags.error.message,
                )
            )

        head = self._git.head_sha()
        if isinstance(head, Err):
            return _git_failed(head.error.message)
        state.commit_sha = head.value
        self._console.success(f"pushed {branch} and tags ({head.value[:8]})")
        return Ok(None)

    def _publish_primary(self, state: ReleaseState) -> Result[None, ReleaseError]:
        token_env = self._config.registry.token_env
        if not self._token():
            return Err(
                ReleaseError(
                    kind="token_missing",
                    message=f"environment variable {token_env} is not set",
                    hint=f"export {token_env} or add it to .env",
                )
            )

        manifest = self._read_manifest()
        if isinstance(manifest, Err):
            return manifest

        self._console.print("npm publish --access public", Style.DIM)
        published = self._npm.publish()
        if isinstance(published, Err):
            return _npm_failed("publish_failed", "npm publish failed", published.error)

        url = self._config.registry.primary_url.format(name=manifest.value.name)
        state.registry_urls.append(url)
        self._console.success(f"published {manifest.value.name}@{state.version}")
        return Ok(None)

    def _publish_secondary(self, state: ReleaseState) -> Result[None, ReleaseError]:
        manifest = self._read_manifest()
        if isinstance(manifest, Err):
            return manifest
        name = manifest.value.name
        registry = self._config.registry

        if not manifest.value.is_scoped:
            self._console.info(f"{name} is not scoped; skipping {registry.secondary}")
            return Ok(None)

        npmrc = self.root / self._config.files.npmrc
        try:
            content = read_text_if_exists(npmrc)
        except OSError as e:
            self._soft_failure(state, f"failed to read {npmrc.name}: {e}", None)
            return Ok(None)

        scope = name.split("/", 1)[0]
        if content is None:
            self._soft_failure(
                state,
                f"{npmrc.name} not found; skipping {registry.secondary}",
                f"Create {npmrc.name} with '{scope}:registry={registry.secondary}'",
            )
            return Ok(None)
        if registry.secondary_host not in content:
            self._soft_failure(
                state,
                f"{npmrc.name} has no entry for {registry.secondary_host}",
                f"Add '{scope}:registry={registry.secondary}' to {npmrc.name}",
            )
            return Ok(None)

        self._console.print(f"npm publish --registry={registry.secondary}", Style.DIM)
        published = self._npm.publish_to(registry.secondary)
        if isinstance(published, Err):
            self._soft_failure(
                state,
                f"publish to {registry.secondary} failed: {published.error.message}",
                f"Publish to {registry.secondary} manually",
            )
            return Ok(None)

        state.registry_urls.append(registry.secondary_url.format(name=name))
        self._console.success(f"published {name}@{state.version} to {registry.secondary}")
        return Ok(None)

    def _verification(self, state: ReleaseState) -> Result[None, ReleaseError]:
        expected = _require_version(state)
        manifest = self._read_manifest()
        if isinstance(manifest, Err):
            return manifest
        name = manifest.value.name
        verify = self._config.verify

        def on_retry(attempt: int, result: Result[str, NpmError]) -> None:
            seen = result.value if isinstance(result, Ok) else "nothing"
            self._console.print(
                f"registry serves {seen} (attempt {attempt}/{verify.attempts}); "
                f"retrying in {verify.delay_seconds:g}s",
                Style.DIM,
            )

        self._console.print(f"npm view {name} version", Style.DIM)
        outcome = retry_until(
            lambda: self._npm.view_version(name),
            lambda r: isinstance(r, Ok) and r.value == expected,
            attempts=verify.attempts,
            delay_seconds=verify.delay_seconds,
            sleep=self._sleep,
            on_retry=on_retry,
        )
        last = outcome.value
        if not outcome.accepted:
            if isinstance(last, Err):
                return Err(
                    ReleaseError(
                        kind="verify_timeout",
                        message=(
                            f"could not fetch {name} from the registry "
                            f"after {outcome.attempts} attempts"
                        ),
                        hint=last.error.message,
                    )
                )
            return Err(
                ReleaseError(
                    kind="version_mismatch",
                    message=f"registry serves {name}@{last.value}, expected {expected}",
                )
            )
        self._console.success(f"registry serves {name}@{expected}")

        metadata = self._npm.view_metadata(name)
        if isinstance(metadata, Err):
            self._soft_failure(state, f"could not fetch package metadata for {name}", None)
            return Ok(None)
        state.package_info = metadata.value or None
        return Ok(None)

    def _report(self, state: ReleaseState, *, failed: bool) -> Result[None, ReleaseError]:
        state.finalize(failed=failed)
        path = self.report_path
        try:
            write_report(path, state)
        except OSError as e:
            self._console.error(f"failed to write report: {e}")
            return Err(ReleaseError(kind="report_failed", message=f"failed to write {path}: {e}"))
        self._console.success(f"report written: {path.name} ({state.outcome})")
        return Ok(None)

    # -- helpers --------------------------------------------------------------

    def _read_manifest(self) -> Result[Manifest, ReleaseError]:
        result = read_manifest(self.root / self._config.files.manifest)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="manifest_invalid",
                    message=result.error.message,
                    hint=str(result.error.path),
                )
            )
        return Ok(result.value)

    def _token(self) -> str:
        return self._env.get(self._config.registry.token_env, "").strip()

    def _redact(self, text: str) -> str:
        token = self._token()
        if token:
            return text.replace(token, _REDACTED)
        return text

    def _warn(self, state: ReleaseState, message: str) -> None:
        message = self._redact(message)
        self._console.warning(message)
        state.warnings.append(message)

    def _soft_failure(self, state: ReleaseState, issue: str, solution: str | None) -> None:
        issue = self._redact(issue)
        self._console.warning(issue)
        state.record_issue(issue, solution)

    def _redacted(self, error: ReleaseError) -> ReleaseError:
        hint = self._redact(error.hint) if error.hint is not None else None
        return replace(error, message=self._redact(error.message), hint=hint)

    def _record_failure(self, state: ReleaseState, error: ReleaseError) -> None:
        state.errors.append(error.message)
        self._console.error(error.message)
        if error.hint:
            self._console.print(f"hint: {error.hint}", Style.DIM)


def _require_version(state: ReleaseState) -> str:
    if state.version is None:
        raise AssertionError("version must be set by pre-verification")
    return state.version


def _git_failed(message: str) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="git_failed", message=f"git failed: {message}"))


def _changelog_failed(message: str, path: Path) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="changelog_failed", message=message, hint=str(path)))


def _npm_failed(kind: ReleaseErrorKind, message: str, error: NpmError) -> Err[ReleaseError]:
    return Err(ReleaseError(kind=kind, message=message, hint=error.message))
