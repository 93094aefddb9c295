"""Typed client for application operations.

Encapsulates the /applications/{id} endpoints.
"""

from typing import List, Optional

from httpx import AsyncClient
from pydantic import TypeAdapter

from applytrack.clients.utils import (
    call_delete,
    call_get,
    call_patch,
    validate_response,
    validate_status,
)
from applytrack.schemas.base import Application, ApplicationStatus
from applytrack.schemas.response import ApplicationDetail, StatusResponse

_applications_adapter = TypeAdapter(List[Application])


class ApplicationClient:
    """Typed client for application operations.

    Usage:
        async with get_client() as http_client:
            client = ApplicationClient(http_client)
            applications = await client.list_overview()
    """

    def __init__(self, http_client: AsyncClient):
        self.http_client = http_client
        self._base_path = "/applications"

    async def list_overview(self) -> List[Application]:
        """List all applications with their document counts.

        Raises:
            RemoteStoreError: If the request fails
        """
        response = await call_get(self.http_client, f"{self._base_path}/overview")
        return validate_response(response, _applications_adapter)

    async def get_detail(self, application_id: int) -> ApplicationDetail:
        """Get documents and status history of one application."""
        response = await call_get(self.http_client, f"{self._base_path}/{application_id}")
        return validate_response(response, ApplicationDetail)

    async def delete_application(self, application_id: int) -> StatusResponse:
        """Delete an application with all of its folders and documents."""
        response = await call_delete(self.http_client, f"{self._base_path}/{application_id}")
        return validate_status(response)

    async def rename_application(self, application_id: int, new_name: str) -> StatusResponse:
        """Rename an application (its company name)."""
        response = await call_patch(
            self.http_client,
            f"{self._base_path}/{application_id}/rename",
            json={"new_name": new_name},
        )
        return validate_status(response)

    async def update_status(
        self,
        application_id: int,
        status: ApplicationStatus,
        notes: Optional[str] = None,
    ) -> StatusResponse:
        """Move an application to another lifecycle status."""
        payload: dict[str, str] = {"status": ApplicationStatus(status).value}
        if notes:
            payload["notes"] = notes
        response = await call_patch(
            self.http_client,
            f"{self._base_path}/{application_id}/status",
            json=payload,
        )
        return validate_status(response)
