"""Configuration commands."""

import typer
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from applytrack.cli.app import config_app
from applytrack.cli.commands.command_utils import abort, console
from applytrack.config import ConfigManager


@config_app.command("show")
def show_config():
    """Show the effective configuration (file values with environment overrides)."""
    manager = ConfigManager()
    config = manager.config

    table = Table(title=f"Configuration ({manager.config_file})")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    for name, value in config.model_dump(mode="json").items():
        table.add_row(name, escape(str(value)))
    console.print(table)


@config_app.command("set")
def set_config(
    name: str = typer.Argument(..., help="Setting name, e.g. api_url"),
    value: str = typer.Argument(..., help="New value"),
):
    """Change one setting in the config file."""
    try:
        config = ConfigManager().set_value(name, value)
    except KeyError:
        abort(f"Unknown setting '{name}'")
    except ValidationError as e:
        abort(f"Invalid value for '{name}': {e.errors()[0]['msg']}")
    console.print(f"[green]{name} = {escape(str(getattr(config, name)))}[/green]")
