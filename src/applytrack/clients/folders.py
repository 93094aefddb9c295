"""Typed client for folder operations.

Listing and creation are scoped to an application
(/applications/{id}/folders); everything else addresses the folder
directly (/folders/{id}/*).
"""

from typing import List, Optional

from httpx import AsyncClient
from pydantic import TypeAdapter

from applytrack.clients.utils import (
    call_delete,
    call_get,
    call_patch,
    call_post,
    validate_response,
    validate_status,
)
from applytrack.schemas.base import Folder
from applytrack.schemas.response import StatusResponse

_folders_adapter = TypeAdapter(List[Folder])


class FolderClient:
    """Typed client for folder operations.

    Usage:
        async with get_client() as http_client:
            client = FolderClient(http_client)
            roots = await client.list_folders(application_id=1)
    """

    def __init__(self, http_client: AsyncClient):
        self.http_client = http_client
        self._base_path = "/folders"

    async def list_folders(
        self, application_id: int, parent_id: Optional[int] = None
    ) -> List[Folder]:
        """List the immediate child folders of ``parent_id``.

        Args:
            application_id: Owning application
            parent_id: Parent folder, None for the application root

        Returns:
            Folders in backend order
        """
        params = {"parent_id": parent_id} if parent_id is not None else None
        response = await call_get(
            self.http_client,
            f"/applications/{application_id}/folders",
            params=params,
        )
        return validate_response(response, _folders_adapter)

    async def create_folder(
        self, application_id: int, name: str, parent_id: Optional[int] = None
    ) -> Folder:
        """Create a folder under ``parent_id`` (or the application root)."""
        payload: dict[str, object] = {"name": name}
        if parent_id is not None:
            payload["parent_id"] = parent_id
        response = await call_post(
            self.http_client,
            f"/applications/{application_id}/folders",
            json=payload,
        )
        return validate_response(response, Folder)

    async def rename_folder(self, folder_id: int, new_name: str) -> StatusResponse:
        response = await call_patch(
            self.http_client,
            f"{self._base_path}/{folder_id}/rename",
            json={"new_name": new_name},
        )
        return validate_status(response)

    async def move_folder(
        self, folder_id: int, target_parent_id: Optional[int] = None
    ) -> StatusResponse:
        """Reassign the parent of a folder. None moves it to the application root."""
        response = await call_post(
            self.http_client,
            f"{self._base_path}/{folder_id}/move",
            json={"target_parent_id": target_parent_id},
        )
        return validate_status(response)

    async def delete_folder(self, folder_id: int) -> StatusResponse:
        """Delete a folder with its subfolders and contained documents."""
        response = await call_delete(self.http_client, f"{self._base_path}/{folder_id}")
        return validate_status(response)

    async def index_folder(self, folder_id: int) -> StatusResponse:
        """Index every document below a folder, recursively."""
        response = await call_post(self.http_client, f"{self._base_path}/{folder_id}/index-all")
        return validate_status(response)
