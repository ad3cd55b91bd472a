from __future__ import annotations

import typer

from pregyp import __version__
from pregyp.cli.commands.publish_cmd import publish_cmd

USAGE = """\
Usage: pregyp-github publish [--release]

publishes the contents of ./build/stage/{version} to the current version's GitHub release"""


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command("publish")(publish_cmd)


@app.command("help")
def help_cmd() -> None:
    """Show usage."""
    typer.echo(USAGE)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_show_version,
        is_eager=True,
    ),
) -> None:
    pass


def main() -> None:
    app()
