"""Commands that reorganize applications: folders, moves, renames and deletes."""

from typing import Awaitable, Callable, List, Optional

import typer
from rich.markup import escape

from applytrack.cli.app import app
from applytrack.cli.commands.command_utils import (
    abort,
    console,
    exit_on_error,
    explorer_session,
    run_with_cleanup,
)
from applytrack.errors import ApplytrackError
from applytrack.schemas.base import ApplicationStatus
from applytrack.schemas.tree import NodeRef, TreeNode
from applytrack.services.drag_drop import BatchResult, DragDropController
from applytrack.services.explorer import ExplorerService
from applytrack.state.tree_ops import find_application, locate_folder

ITEM_KINDS = {
    "app": "application",
    "application": "application",
    "folder": "folder",
    "file": "file",
}


async def load_all_trees(explorer: ExplorerService) -> None:
    """Load every application with its full folder tree."""
    await explorer.load_applications()
    exit_on_error(explorer)
    for node in explorer.state.tree:
        await explorer.rebuild_tree(node.id)


def drop_target(
    explorer: ExplorerService, application_id: int, folder_id: Optional[int]
) -> TreeNode:
    target: Optional[TreeNode]
    if folder_id is None:
        target = find_application(explorer.state.tree, application_id)
        if target is None:
            abort(f"Application {application_id} not found")
    else:
        target = locate_folder(explorer.state.tree, folder_id)
        if target is None:
            abort(f"Folder {folder_id} not found")
    return target


async def resolve_ref(explorer: ExplorerService, item: str) -> NodeRef:
    """Turn ``kind:id`` (kinds: app, folder, file) into a node reference."""
    kind_name, _, raw_id = item.partition(":")
    kind = ITEM_KINDS.get(kind_name.lower())
    if kind is None or not raw_id.isdigit():
        abort(f"Invalid item '{item}', expected app:ID, folder:ID or file:ID")
    item_id = int(raw_id)

    match kind:
        case "application":
            if find_application(explorer.state.tree, item_id) is None:
                abort(f"Application {item_id} not found")
            return NodeRef(kind="application", id=item_id, application_id=item_id)
        case "folder":
            folder = locate_folder(explorer.state.tree, item_id)
            if folder is None:
                abort(f"Folder {item_id} not found")
            return folder.ref
        case _:
            listing = await explorer.store.documents.list_files()
            for document in listing.files:
                if document.id == item_id:
                    return NodeRef(kind="file", id=item_id, application_id=document.application_id)
            abort(f"Document {item_id} not found")


def print_batch_result(result: BatchResult) -> None:
    console.print(
        f"Bulk {result.action}: [green]{len(result.succeeded)} succeeded[/green], "
        f"[red]{len(result.failed)} failed[/red]"
    )
    for key, message in result.failed.items():
        console.print(f"  [red]{key}: {escape(message)}[/red]")
    if not result.ok:
        raise typer.Exit(1)


async def run_mkdir(application_id: int, name: str, parent_id: Optional[int]) -> None:
    async with explorer_session() as explorer:
        await explorer.load_applications()
        folder = await explorer.create_folder_in(application_id, name, parent_id=parent_id)
        exit_on_error(explorer)
        assert folder is not None
        console.print(f"[green]Created folder '{escape(folder.name)}' (#{folder.id})[/green]")


async def run_move_folder(folder_id: int, parent_id: Optional[int]) -> None:
    async with explorer_session() as explorer:
        await load_all_trees(explorer)
        source = locate_folder(explorer.state.tree, folder_id)
        if source is None:
            abort(f"Folder {folder_id} not found")

        target = drop_target(explorer, source.application_id, parent_id)
        await DragDropController(explorer).drop(source.ref, target)
        exit_on_error(explorer)
        console.print(f"[green]Moved folder '{escape(source.name)}'[/green]")


async def run_move_document(
    application_id: int, document_id: int, folder_id: Optional[int]
) -> None:
    async with explorer_session() as explorer:
        await load_all_trees(explorer)
        target = drop_target(explorer, application_id, folder_id)
        source = NodeRef(kind="file", id=document_id, application_id=application_id)
        await DragDropController(explorer).drop(source, target)
        exit_on_error(explorer)
        console.print(f"[green]Moved document #{document_id}[/green]")


async def run_bulk(action: str, items: List[str]) -> None:
    async with explorer_session() as explorer:
        await load_all_trees(explorer)
        controller = DragDropController(explorer)
        controller.toggle_multi_select()
        for item in items:
            controller.click(await resolve_ref(explorer, item))

        if action == "delete":
            result = await controller.bulk_delete()
        else:
            result = await controller.bulk_index()
        print_batch_result(result)


async def run_simple(
    description: str, operation: Callable[[ExplorerService], Awaitable[bool]]
) -> None:
    """Run one explorer mutation and report the outcome."""
    async with explorer_session() as explorer:
        await explorer.load_applications()
        await operation(explorer)
        exit_on_error(explorer)
        console.print(f"[green]{escape(description)}[/green]")


@app.command()
def mkdir(
    application_id: int = typer.Argument(..., help="Application ID"),
    name: str = typer.Argument(..., help="Folder name"),
    parent: Optional[int] = typer.Option(None, "--parent", "-p", help="Parent folder ID"),
):
    """Create a folder at the application root or inside another folder."""
    run_with_cleanup(run_mkdir(application_id, name, parent))


@app.command("rename-folder")
def rename_folder(
    folder_id: int = typer.Argument(..., help="Folder ID"),
    new_name: str = typer.Argument(..., help="New folder name"),
):
    """Rename a folder."""
    run_with_cleanup(
        run_simple(
            f"Renamed folder #{folder_id} to '{new_name}'",
            lambda explorer: explorer.rename_folder(folder_id, new_name),
        )
    )


@app.command("rename-app")
def rename_app(
    application_id: int = typer.Argument(..., help="Application ID"),
    new_name: str = typer.Argument(..., help="New company name"),
):
    """Rename an application."""
    run_with_cleanup(
        run_simple(
            f"Renamed application #{application_id} to '{new_name}'",
            lambda explorer: explorer.rename_application(application_id, new_name),
        )
    )


@app.command("set-status")
def set_status(
    application_id: int = typer.Argument(..., help="Application ID"),
    status: ApplicationStatus = typer.Argument(..., help="New status"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Note stored with the change"),
):
    """Change the lifecycle status of an application."""
    run_with_cleanup(
        run_simple(
            f"Application #{application_id} is now '{status.label}'",
            lambda explorer: explorer.update_application_status(application_id, status, notes),
        )
    )


@app.command("rm-folder")
def remove_folder(
    folder_id: int = typer.Argument(..., help="Folder ID"),
):
    """Delete a folder with its subfolders and documents."""
    run_with_cleanup(
        run_simple(
            f"Deleted folder #{folder_id}",
            lambda explorer: explorer.delete_folder(folder_id),
        )
    )


@app.command("rm-app")
def remove_app(
    application_id: int = typer.Argument(..., help="Application ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete an application with all its folders and documents."""
    if not yes:
        typer.confirm(f"Delete application #{application_id} and all its documents?", abort=True)
    run_with_cleanup(
        run_simple(
            f"Deleted application #{application_id}",
            lambda explorer: explorer.delete_application(application_id),
        )
    )


@app.command("rm-doc")
def remove_document(
    application_id: int = typer.Argument(..., help="Application ID"),
    document_id: int = typer.Argument(..., help="Document ID"),
):
    """Delete a document."""
    run_with_cleanup(
        run_simple(
            f"Deleted document #{document_id}",
            lambda explorer: explorer.delete_document(application_id, document_id),
        )
    )


@app.command("mv-folder")
def move_folder(
    folder_id: int = typer.Argument(..., help="Folder ID"),
    into: Optional[int] = typer.Option(
        None, "--into", help="Target folder ID, defaults to the application root"
    ),
):
    """Move a folder within its application."""
    run_with_cleanup(run_move_folder(folder_id, into))


@app.command("mv-doc")
def move_document(
    application_id: int = typer.Argument(..., help="Application ID"),
    document_id: int = typer.Argument(..., help="Document ID"),
    into: Optional[int] = typer.Option(
        None, "--into", help="Target folder ID, defaults to the application root"
    ),
):
    """Move a document within its application."""
    run_with_cleanup(run_move_document(application_id, document_id, into))


@app.command("bulk-delete")
def bulk_delete(
    items: List[str] = typer.Argument(..., help="Items as app:ID, folder:ID or file:ID"),
):
    """Delete several items one after another. Failed items do not stop the batch."""
    try:
        run_with_cleanup(run_bulk("delete", items))
    except ApplytrackError as e:
        abort(str(e))


@app.command("bulk-index")
def bulk_index(
    items: List[str] = typer.Argument(..., help="Items as folder:ID or file:ID"),
):
    """Index several documents and folders one after another."""
    try:
        run_with_cleanup(run_bulk("index", items))
    except ApplytrackError as e:
        abort(str(e))
