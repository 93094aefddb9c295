"""Document commands: upload, view and index."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.panel import Panel

from applytrack.cli.app import app
from applytrack.cli.commands.command_utils import (
    abort,
    console,
    exit_on_error,
    explorer_session,
    remote_store,
    run_with_cleanup,
)
from applytrack.errors import ApplytrackError
from applytrack.services.viewer import DocumentViewer
from applytrack.state.models import LoadStatus


async def run_upload(
    paths: List[Path], application_id: Optional[int], company_name: Optional[str]
) -> None:
    async with explorer_session() as explorer:
        await explorer.load_applications()
        summary = await explorer.upload_files(
            paths, application_id=application_id, company_name=company_name
        )
        exit_on_error(explorer)
        assert summary is not None
        console.print(
            f"[green]Uploaded {len(paths)} file(s) to application "
            f"#{summary.application_id or application_id}[/green]"
        )
        if summary.message:
            console.print(escape(summary.message))


async def run_view(application_id: int, document_id: int) -> None:
    async with remote_store() as store:
        listing = await store.documents.list_files(application_id)
        document = next((doc for doc in listing.files if doc.id == document_id), None)
        if document is None:
            abort(f"Document {document_id} not found in application {application_id}")

        viewer = DocumentViewer(store.documents)
        state = await viewer.open(document)
        if state.status == LoadStatus.ERROR:
            abort(state.error or "Failed to load document")
        console.print(Panel(escape(state.text), title=escape(document.filename), expand=False))


async def run_index_document(document_id: int, application_id: Optional[int]) -> None:
    async with explorer_session() as explorer:
        if application_id is not None:
            await explorer.select_application(application_id)
        await explorer.index_document(document_id, application_id)
        exit_on_error(explorer)
        console.print(f"[green]Indexed document #{document_id}[/green]")


async def run_index_folder(folder_id: int) -> None:
    async with explorer_session() as explorer:
        await explorer.index_folder(folder_id)
        exit_on_error(explorer)
        console.print(f"[green]Indexed all documents in folder #{folder_id}[/green]")


@app.command()
def upload(
    paths: List[Path] = typer.Argument(
        ..., help="Files to upload", exists=True, dir_okay=False, readable=True
    ),
    application: Optional[int] = typer.Option(
        None, "--app", "-a", help="Add the files to this application"
    ),
    company: Optional[str] = typer.Option(
        None, "--company", "-c", help="Create a new application for this company"
    ),
):
    """Upload documents into an existing or a new application."""
    if application is None and not company:
        abort("Pass --app to add to an application or --company to create one")
    run_with_cleanup(run_upload(paths, application, company))


@app.command()
def view(
    application_id: int = typer.Argument(..., help="Application ID"),
    document_id: int = typer.Argument(..., help="Document ID"),
):
    """Show the extracted text of a document."""
    try:
        run_with_cleanup(run_view(application_id, document_id))
    except ApplytrackError as e:
        abort(str(e))


@app.command("index-doc")
def index_document(
    document_id: int = typer.Argument(..., help="Document ID"),
    application: Optional[int] = typer.Option(None, "--app", "-a", help="Application ID"),
):
    """Index a document so the assistant can use it."""
    run_with_cleanup(run_index_document(document_id, application))


@app.command("index-folder")
def index_folder(
    folder_id: int = typer.Argument(..., help="Folder ID"),
):
    """Index every document in a folder."""
    run_with_cleanup(run_index_folder(folder_id))
