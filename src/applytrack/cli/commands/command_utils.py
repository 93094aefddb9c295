"""Utility functions for applytrack CLI commands."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Coroutine, NoReturn, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from applytrack.clients.async_client import get_client
from applytrack.clients.store import RemoteStore
from applytrack.config import ApplytrackConfig, get_config
from applytrack.services.explorer import ExplorerService

console = Console()

T = TypeVar("T")


def run_with_cleanup(coro: Coroutine[None, None, T]) -> T:
    """Run an async CLI operation on a fresh event loop."""
    return asyncio.run(coro)


def abort(message: str) -> NoReturn:
    console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(1)


@asynccontextmanager
async def remote_store(config: Optional[ApplytrackConfig] = None) -> AsyncIterator[RemoteStore]:
    """Typed clients over one HTTP connection configured from ``config``."""
    config = config or get_config()
    async with get_client(config) as client:
        yield RemoteStore(client, upload_timeout=config.upload_timeout)


@asynccontextmanager
async def explorer_session(
    config: Optional[ApplytrackConfig] = None,
) -> AsyncIterator[ExplorerService]:
    config = config or get_config()
    async with remote_store(config) as store:
        yield ExplorerService(store, max_depth=config.max_folder_depth)


def exit_on_error(explorer: ExplorerService) -> None:
    """Abort the command if the last operation left an error behind."""
    if explorer.state.error:
        abort(explorer.state.error)
