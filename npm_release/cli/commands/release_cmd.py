from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import NoReturn

import typer

from npm_release.cli.context import build_context
from npm_release.core.result import Err
from npm_release.git.repository import Repository
from npm_release.npm.client import NpmClient
from npm_release.release.errors import ReleaseError, release_error_code
from npm_release.release.pipeline import ReleasePipeline


class ReleaseKindChoice(str, Enum):
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


def _exit(error: ReleaseError, *, report: Path) -> NoReturn:
    typer.echo(f"error: {error.message}", err=True)
    if error.hint:
        typer.echo(f"hint: {error.hint}", err=True)
    typer.echo(f"report: {report}", err=True)
    raise typer.Exit(code=int(release_error_code(error.kind)))


def run(
    kind: ReleaseKindChoice = typer.Argument(
        ReleaseKindChoice.PATCH, help="Which version component to bump."
    ),
    cwd: Path | None = typer.Option(None, "--cwd", help="Package root (default: current dir)."),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: <root>/npm-release.toml)."
    ),
) -> None:
    """Release the package: verify, test, build, version, tag, push, publish."""
    ctx = build_context(cwd=cwd, config_path=config)

    pipeline = ReleasePipeline(
        root=ctx.root,
        config=ctx.config,
        console=ctx.console,
        git=Repository(ctx.root),
        npm=NpmClient(ctx.root, env=ctx.env),
        env=ctx.env,
    )
    result = pipeline.run(kind.value)
    if isinstance(result, Err):
        _exit(result.error, report=pipeline.report_path)
