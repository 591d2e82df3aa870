"""npm command wrapper.

Install, test, build and publish stream their output to the terminal;
registry queries capture it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from npm_release.core.result import Err, Ok, Result
from npm_release.platform.process import ProcessError
from npm_release.platform.process import run as run_process
from npm_release.platform.process import run_live

_NPM_QUERY_TIMEOUT_SECONDS = 60.0

__all__ = ["NpmClient", "NpmError"]


@dataclass(frozen=True, slots=True)
class NpmError:
    """Error from an npm invocation.

    Attributes:
        command: npm subcommand (e.g. "ci", "publish")
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class NpmClient:
    """Runs npm in a package directory.

    Attributes:
        root: Package root (directory containing package.json)
        env: Environment passed to npm; carries the publish token
    """

    def __init__(self, root: Path, env: Mapping[str, str] | None = None) -> None:
        self.root = root
        self.env = env

    def pkg_fix(self) -> Result[None, NpmError]:
        """Normalize package.json in place (`npm pkg fix`)."""
        return self._live(["pkg", "fix"], "pkg fix")

    def clean_install(self) -> Result[None, NpmError]:
        """Reproducible install from the lockfile (`npm ci`)."""
        return self._live(["ci"], "ci")

    def run_tests(self) -> Result[None, NpmError]:
        return self._live(["test"], "test")

    def run_script(self, name: str) -> Result[None, NpmError]:
        return self._live(["run", name], f"run {name}")

    def set_version(self, version: str) -> Result[None, NpmError]:
        """Write the version to package.json (and lockfile) without tagging."""
        result = self._capture(["version", version, "--no-git-tag-version"], "version")
        return result.map(lambda _: None)

    def publish(self) -> Result[None, NpmError]:
        return self._live(["publish", "--access", "public"], "publish")

    def publish_to(self, registry: str) -> Result[None, NpmError]:
        return self._live(["publish", f"--registry={registry}"], "publish --registry")

    def view_version(self, name: str) -> Result[str, NpmError]:
        """Version currently served by the registry for `name`."""
        result = self._capture(["view", name, "version"], "view version")
        if isinstance(result, Err):
            return result
        version = result.value.strip().strip('"')
        if not version:
            return Err(NpmError(command="view version", message=f"no version published for {name}"))
        return Ok(version)

    def view_metadata(self, name: str) -> Result[str, NpmError]:
        """Human-readable package summary (`npm view <name>`)."""
        return self._capture(["view", name], "view").map(lambda out: out.strip())

    def _live(self, args: list[str], label: str) -> Result[None, NpmError]:
        result = run_live(["npm", *args], cwd=self.root, env=self.env)
        if isinstance(result, Err):
            return Err(_npm_error(label, result.error))
        return Ok(None)

    def _capture(self, args: list[str], label: str) -> Result[str, NpmError]:
        result = run_process(
            ["npm", *args], cwd=self.root, env=self.env, timeout=_NPM_QUERY_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            return Err(_npm_error(label, result.error))
        return Ok(result.value)


def _npm_error(label: str, e: ProcessError) -> NpmError:
    return NpmError(
        command=label,
        message=e.output or f"npm {label} failed (exit {e.returncode})",
        returncode=e.returncode,
    )
