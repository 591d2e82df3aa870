from __future__ import annotations

import typer

from npm_release import __version__
from npm_release.cli.commands.check import check
from npm_release.cli.commands.release_cmd import run


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Release an npm package from its git checkout.",
)


# Commands
app.command()(run)
app.command()(check)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    del version


def main() -> None:
    app()
