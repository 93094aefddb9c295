"""Browsing commands: list applications, show folder trees and listings."""

from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from applytrack.cli.app import app
from applytrack.cli.commands.command_utils import (
    console,
    exit_on_error,
    explorer_session,
    run_with_cleanup,
)
from applytrack.schemas.base import Application
from applytrack.schemas.tree import ApplicationNode, BreadcrumbItem, FolderNode
from applytrack.services.tree_builder import count_nodes
from applytrack.state import Listing


def applications_table(applications: List[Application]) -> Table:
    table = Table(title="Applications")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Company", style="bold")
    table.add_column("Position")
    table.add_column("Status", style="green")
    table.add_column("Documents", justify="right")

    for application in applications:
        table.add_row(
            str(application.id),
            escape(application.company_name),
            escape(application.position or ""),
            escape(application.status_label),
            str(application.document_count),
        )
    return table


def add_folders_to_tree(branch: Tree, nodes: List[FolderNode]) -> None:
    for node in nodes:
        child = branch.add(f"[bold blue]{escape(node.name)}/[/bold blue] [dim]#{node.id}[/dim]")
        add_folders_to_tree(child, node.children)


def application_tree(node: ApplicationNode) -> Tree:
    """Render the whole folder hierarchy, regardless of expansion state."""
    tree = Tree(f"[bold]{escape(node.application.display_name)}[/bold] [dim]#{node.id}[/dim]")
    if not node.children:
        tree.add("[dim]No folders[/dim]")
    add_folders_to_tree(tree, node.children)
    return tree


def format_breadcrumb(breadcrumb: List[BreadcrumbItem]) -> str:
    return " / ".join(escape(item.name) for item in breadcrumb)


def listing_table(listing: Listing) -> Table:
    table = Table()
    table.add_column("Type")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Indexed", justify="center")

    for folder in listing.folders:
        name = f"[bold blue]{escape(folder.name)}/[/bold blue]"
        table.add_row("folder", str(folder.id), name, "")
    for document in listing.files:
        table.add_row(
            "file",
            str(document.id),
            escape(document.filename),
            "[green]yes[/green]" if document.indexed else "[yellow]no[/yellow]",
        )
    return table


async def run_apps() -> None:
    async with explorer_session() as explorer:
        await explorer.load_applications()
        exit_on_error(explorer)
        if not explorer.state.applications:
            console.print("No applications found")
            return
        console.print(applications_table(explorer.state.applications))


async def run_tree(application_id: int) -> None:
    async with explorer_session() as explorer:
        await explorer.select_application(application_id)
        exit_on_error(explorer)
        forest = [node for node in explorer.state.tree if node.id == application_id]
        console.print(application_tree(forest[0]))
        console.print(f"[dim]{count_nodes(forest) - 1} folder(s)[/dim]")


async def run_ls(application_id: int, folder_id: Optional[int]) -> None:
    async with explorer_session() as explorer:
        await explorer.select_application(application_id)
        if folder_id is not None and not explorer.state.error:
            await explorer.select_folder(folder_id)
        exit_on_error(explorer)

        listing = explorer.state.listing
        assert listing is not None
        console.print(f"[bold]{format_breadcrumb(explorer.state.breadcrumb)}[/bold]")
        if not listing.folders and not listing.files:
            console.print("[dim]Empty folder[/dim]")
            return
        console.print(listing_table(listing))


@app.command()
def apps():
    """List all applications."""
    run_with_cleanup(run_apps())


@app.command()
def tree(
    application_id: int = typer.Argument(..., help="Application ID"),
):
    """Show the folder tree of an application."""
    run_with_cleanup(run_tree(application_id))


@app.command("ls")
def list_folder(
    application_id: int = typer.Argument(..., help="Application ID"),
    folder: Optional[int] = typer.Option(
        None, "--folder", "-f", help="Folder ID, defaults to the application root"
    ),
):
    """List the folders and documents at the application root or in a folder."""
    run_with_cleanup(run_ls(application_id, folder))
