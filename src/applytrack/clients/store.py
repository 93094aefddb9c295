"""Bundle of typed clients sharing one HTTP connection."""

from typing import Optional

from httpx import AsyncClient

from applytrack.clients.applications import ApplicationClient
from applytrack.clients.chat import ChatClient
from applytrack.clients.documents import DocumentClient
from applytrack.clients.folders import FolderClient
from applytrack.clients.reports import ReportClient


class RemoteStore:
    """Every backend operation the explorer needs, grouped by resource.

    Usage:
        async with get_client() as http_client:
            store = RemoteStore(http_client)
            folders = await store.folders.list_folders(1)
    """

    def __init__(self, http_client: AsyncClient, upload_timeout: Optional[float] = None):
        self.http_client = http_client
        self.applications = ApplicationClient(http_client)
        self.folders = FolderClient(http_client)
        self.documents = DocumentClient(http_client, upload_timeout=upload_timeout)
        self.chat = ChatClient(http_client)
        self.reports = ReportClient(http_client)
