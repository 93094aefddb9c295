from typing import Optional

import typer

from applytrack import __version__
from applytrack.config import init_cli_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        typer.echo(f"applytrack version: {__version__}")
        raise typer.Exit()


app = typer.Typer(name="applytrack", help="Browse and organize job applications")


@app.callback()
def app_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Applytrack - browse application folders, documents, chat and reports."""
    # Log to file only so command output stays clean
    init_cli_logging()


## config

config_app = typer.Typer(help="Show or change applytrack configuration")
app.add_typer(config_app, name="config")
