from __future__ import annotations

import typer

from gbp import __version__
from gbp.cli.commands.report import report
from gbp.cli.commands.serve import serve
from gbp.cli.commands.validate import validate_config


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(report)
app.command("validate-config")(validate_config)
app.command()(serve)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    """Track a Go toolchain bump through releases and tiles."""


def main() -> None:
    app()
