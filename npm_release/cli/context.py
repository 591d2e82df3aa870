from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer
from dotenv import load_dotenv

from npm_release.core.config import CONFIG_FILENAME, ReleaseConfig, load_config_or_default
from npm_release.core.errors import ErrorCode
from npm_release.core.result import Err
from npm_release.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ReleaseConfig
    console: ConsoleProtocol
    env: dict[str, str]


def resolve_root(cwd: Path | None) -> Path:
    root = (cwd or Path.cwd()).expanduser().resolve()
    if not root.is_dir():
        typer.echo(f"error: not a directory: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return root


def load_environment(root: Path) -> dict[str, str]:
    """Process environment plus `<root>/.env`; process variables win."""
    load_dotenv(root / ".env", override=False)
    return dict(os.environ)


def build_context(*, cwd: Path | None = None, config_path: Path | None = None) -> CLIContext:
    root = resolve_root(cwd)
    path = config_path if config_path is not None else root / CONFIG_FILENAME

    config_result = load_config_or_default(path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(
        root=root,
        config=config_result.value,
        console=RichConsole(),
        env=load_environment(root),
    )
