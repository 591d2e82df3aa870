from __future__ import annotations

from pathlib import Path

import typer

from npm_release.cli.context import build_context
from npm_release.core.errors import ErrorCode
from npm_release.git.repository import Repository
from npm_release.output.console import Style
from npm_release.release.preflight import CheckStatus, has_errors, run_preflight


def check(
    cwd: Path | None = typer.Option(None, "--cwd", help="Package root (default: current dir)."),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: <root>/npm-release.toml)."
    ),
) -> None:
    """Check release preconditions without changing anything."""
    ctx = build_context(cwd=cwd, config_path=config)
    console = ctx.console

    results = run_preflight(root=ctx.root, config=ctx.config, git=Repository(ctx.root), env=ctx.env)

    console.header("Release preflight")
    for r in results:
        console.print(f"{r.name}: {r.message}", _style_for_status(r.status))
        if r.hint and r.status != CheckStatus.OK:
            console.print(f"hint: {r.hint}", Style.DIM)

    if has_errors(results):
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    console.success("ready to release")


def _style_for_status(status: CheckStatus) -> Style:
    if status == CheckStatus.OK:
        return Style.SUCCESS
    if status == CheckStatus.WARNING:
        return Style.WARNING
    return Style.ERROR
