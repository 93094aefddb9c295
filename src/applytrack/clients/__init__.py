"""Typed API clients for the applications backend.

Each client wraps one group of endpoints, validates responses with the
models in applytrack.schemas and raises RemoteStoreError on failure.
"""

from applytrack.clients.applications import ApplicationClient
from applytrack.clients.async_client import create_client, get_client
from applytrack.clients.chat import ChatClient
from applytrack.clients.documents import DocumentClient, FileSource
from applytrack.clients.folders import FolderClient
from applytrack.clients.reports import ReportClient
from applytrack.clients.store import RemoteStore

__all__ = [
    "ApplicationClient",
    "ChatClient",
    "DocumentClient",
    "FileSource",
    "FolderClient",
    "RemoteStore",
    "ReportClient",
    "create_client",
    "get_client",
]
