from __future__ import annotations

import typer

from relsync import __version__
from relsync.cli.commands.publish import publish

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(publish)


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
    """Create or update a hosted release and sync its files."""
    del version


def main() -> None:
    app()
