"""Report commands."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from applytrack.cli.app import app
from applytrack.cli.commands.command_utils import abort, console, remote_store, run_with_cleanup
from applytrack.config import get_config
from applytrack.errors import ApplytrackError, InvalidReportError
from applytrack.schemas.report import DEFAULT_BASE_COLUMNS, ReportResult
from applytrack.services.reports import ReportBuilder, default_report_filename, to_csv


def parse_custom_column(value: str) -> tuple[str, str]:
    """Split ``name:prompt``."""
    name, sep, prompt = value.partition(":")
    if not sep or not name.strip() or not prompt.strip():
        raise InvalidReportError(f"Custom column '{value}' must look like name:prompt")
    return name.strip(), prompt.strip()


def report_table(report: ReportResult) -> Table:
    table = Table(title=f"Report ({report.total_rows} rows)")
    for column in report.columns:
        table.add_column(column)
    for row in report.rows:
        table.add_row(
            *("" if row.get(c) is None else escape(str(row.get(c))) for c in report.columns)
        )
    return table


async def run_report(
    columns: List[str],
    custom: List[str],
    provider: Optional[str],
    output: Optional[Path],
) -> None:
    config = get_config()
    async with remote_store(config) as store:
        builder = ReportBuilder(
            store.reports,
            provider=config.default_provider,
            columns=columns or DEFAULT_BASE_COLUMNS,
        )
        for value in custom:
            name, prompt = parse_custom_column(value)
            builder.add_custom_column(name, prompt)
        report = await builder.generate(provider)

    console.print(report_table(report))
    if output is not None:
        if output.is_dir():
            output = output / default_report_filename()
        output.write_text(to_csv(report), encoding="utf-8")
        console.print(f"[green]Saved report to {output}[/green]")


async def run_status_report() -> None:
    async with remote_store() as store:
        builder = ReportBuilder(store.reports)
        report = await builder.status_report()

    table = Table(title=f"Applications by status ({report.total_applications} total)")
    table.add_column("Status")
    table.add_column("Count", justify="right")
    for entry in report.status_distribution:
        table.add_row(escape(entry.status), str(entry.count))
    console.print(table)


@app.command()
def report(
    column: List[str] = typer.Option(
        [], "--column", "-c", help="Base column, repeat for more. Defaults to the usual set."
    ),
    custom: List[str] = typer.Option(
        [], "--custom", help="LLM filled column as name:prompt, repeatable"
    ),
    provider: Optional[str] = typer.Option(None, "--provider", help="LLM provider"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the report as CSV to this file or directory"
    ),
):
    """Generate a report with one row per application."""
    try:
        run_with_cleanup(run_report(column, custom, provider, output))
    except ApplytrackError as e:
        abort(str(e))


@app.command("report-status")
def report_status():
    """Show how many applications are in each status."""
    try:
        run_with_cleanup(run_status_report())
    except ApplytrackError as e:
        abort(str(e))
