"""Typed configuration loading and access.

The release pipeline reads an optional ``npm-release.toml`` at the project
root. Every key has a default, so a project without the file releases with
the conventional npm/GitHub settings.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "FilesConfig",
    "RegistryConfig",
    "ReleaseConfig",
    "VerifyConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "npm-release.toml"

DEFAULT_BRANCH = "master"
DEFAULT_REMOTE = "origin"
DEFAULT_TOKEN_ENV = "NPM_TOKEN"
DEFAULT_PRIMARY_URL = "https://www.npmjs.com/package/{name}"
DEFAULT_SECONDARY_REGISTRY = "https://npm.pkg.github.com"
DEFAULT_SECONDARY_URL = "https://npm.pkg.github.com/{name}"

# Registry propagation after `npm publish` usually takes a few seconds.
DEFAULT_VERIFY_ATTEMPTS = 5
DEFAULT_VERIFY_DELAY_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class FilesConfig:
    """Paths relative to the project root."""

    manifest: str = "package.json"
    changelog: str = "CHANGELOG.md"
    report: str = "report.md"
    npmrc: str = ".npmrc"


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Registry endpoints and credentials lookup.

    ``primary_url`` and ``secondary_url`` are page templates; ``{name}`` is
    replaced with the package name.
    """

    token_env: str = DEFAULT_TOKEN_ENV
    primary_url: str = DEFAULT_PRIMARY_URL
    secondary: str = DEFAULT_SECONDARY_REGISTRY
    secondary_url: str = DEFAULT_SECONDARY_URL

    @property
    def secondary_host(self) -> str:
        """Host part of the secondary registry (e.g. npm.pkg.github.com)."""
        host = self.secondary.split("://", 1)[-1]
        return host.split("/", 1)[0]


@dataclass(frozen=True, slots=True)
class VerifyConfig:
    """Post-publish registry polling."""

    attempts: int = DEFAULT_VERIFY_ATTEMPTS
    delay_seconds: float = DEFAULT_VERIFY_DELAY_SECONDS


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    branch: str = DEFAULT_BRANCH
    remote: str = DEFAULT_REMOTE
    files: FilesConfig = field(default_factory=FilesConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    verify: VerifyConfig = field(default_factory=VerifyConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML).

        Raises:
            ValueError: If a numeric setting is out of range.
        """
        release: StrDict = get_table(data, "release") or {}
        files: StrDict = get_table(data, "files") or {}
        registry: StrDict = get_table(data, "registry") or {}
        verify: StrDict = get_table(data, "verify") or {}

        attempts = get_int(verify, "attempts")
        if attempts is None:
            attempts = DEFAULT_VERIFY_ATTEMPTS
        if attempts < 1:
            raise ValueError(f"verify.attempts must be >= 1 (got {attempts})")

        delay = get_float(verify, "delay_seconds")
        if delay is None:
            delay = DEFAULT_VERIFY_DELAY_SECONDS
        if delay < 0:
            raise ValueError(f"verify.delay_seconds must be >= 0 (got {delay})")

        return cls(
            branch=get_str(release, "branch") or DEFAULT_BRANCH,
            remote=get_str(release, "remote") or DEFAULT_REMOTE,
            files=FilesConfig(
                manifest=get_str(files, "manifest") or "package.json",
                changelog=get_str(files, "changelog") or "CHANGELOG.md",
                report=get_str(files, "report") or "report.md",
                npmrc=get_str(files, "npmrc") or ".npmrc",
            ),
            registry=RegistryConfig(
                token_env=get_str(registry, "token_env") or DEFAULT_TOKEN_ENV,
                primary_url=get_str(registry, "primary_url") or DEFAULT_PRIMARY_URL,
                secondary=get_str(registry, "secondary") or DEFAULT_SECONDARY_REGISTRY,
                secondary_url=get_str(registry, "secondary_url") or DEFAULT_SECONDARY_URL,
            ),
            verify=VerifyConfig(attempts=attempts, delay_seconds=delay),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to npm-release.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load config if the file exists, else return the defaults.

    A present but broken file is still an error.
    """
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
