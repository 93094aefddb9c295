"""Chat commands."""

from typing import Optional

import typer
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table

from applytrack.cli.app import app
from applytrack.cli.commands.command_utils import (
    abort,
    console,
    explorer_session,
    run_with_cleanup,
)
from applytrack.config import get_config
from applytrack.services.chat import ChatPanel
from applytrack.state.models import LoadStatus


async def run_chat(
    message: str,
    provider: Optional[str],
    application_id: Optional[int],
    folder_id: Optional[int],
    pre_index: bool,
) -> None:
    config = get_config()
    async with explorer_session(config) as explorer:
        if application_id is not None:
            await explorer.select_application(application_id)
            if folder_id is not None:
                await explorer.select_folder(folder_id)

        panel = ChatPanel(
            explorer.store.chat,
            explorer.store.documents,
            provider=config.default_provider,
            pre_index=pre_index,
        )
        state = await panel.send(message, provider, listed_documents=explorer.listed_documents)

    if state.status != LoadStatus.LOADED or state.response is None:
        abort(state.error or "Chat failed")

    if state.indexed_document_ids:
        console.print(f"[dim]Indexed {len(state.indexed_document_ids)} document(s) first[/dim]")
    console.print(Markdown(state.response.message))
    if state.response.action_taken:
        console.print(f"[yellow]Action taken: {escape(state.response.action_taken)}[/yellow]")


async def run_history(limit: int, clear: bool) -> None:
    config = get_config()
    async with explorer_session(config) as explorer:
        panel = ChatPanel(explorer.store.chat, explorer.store.documents)
        if clear:
            if not await panel.clear_history():
                abort(panel.state.error or "Failed to clear history")
            console.print("[green]Chat history cleared[/green]")
            return
        history = await panel.load_history(limit)
        if panel.state.error:
            abort(panel.state.error)

    if not history:
        console.print("No chat messages")
        return

    table = Table(title="Chat history")
    table.add_column("When", style="dim")
    table.add_column("Role", style="cyan")
    table.add_column("Message")
    for entry in history:
        when = entry.created_at.strftime("%Y-%m-%d %H:%M")
        table.add_row(when, entry.role, escape(entry.content))
    console.print(table)


@app.command()
def chat(
    message: str = typer.Argument(..., help="Question for the assistant"),
    provider: Optional[str] = typer.Option(None, "--provider", help="LLM provider"),
    application: Optional[int] = typer.Option(
        None, "--app", "-a", help="Application whose listed documents give context"
    ),
    folder: Optional[int] = typer.Option(None, "--folder", "-f", help="Folder ID"),
    no_index: bool = typer.Option(
        False, "--no-index", help="Do not index listed documents before sending"
    ),
):
    """Ask the assistant about your applications."""
    pre_index = get_config().pre_index_before_chat and not no_index
    run_with_cleanup(run_chat(message, provider, application, folder, pre_index))


@app.command("chat-history")
def chat_history(
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Number of messages"),
    clear: bool = typer.Option(False, "--clear", help="Delete the stored history"),
):
    """Show or clear the chat history."""
    run_with_cleanup(run_history(limit or get_config().chat_history_limit, clear))
