"""Typed client for document operations.

Covers listing, uploads, indexing, moves, deletion and content retrieval.
Document URLs are scoped to the owning application, except indexing which
addresses the document directly.
"""

import mimetypes
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from httpx import AsyncClient

from applytrack.clients.utils import (
    call_delete,
    call_get,
    call_post,
    validate_response,
    validate_status,
)
from applytrack.schemas.base import Document
from applytrack.schemas.response import (
    DocumentContent,
    FileListResponse,
    StatusResponse,
    UploadSummary,
)

# A file to upload: a path on disk or an in-memory (filename, content) pair
FileSource = Union[Path, Tuple[str, bytes]]


def _to_upload_part(source: FileSource) -> Tuple[str, bytes, str]:
    if isinstance(source, Path):
        filename, content = source.name, source.read_bytes()
    else:
        filename, content = source
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return filename, content, content_type


class DocumentClient:
    """Typed client for document operations.

    Usage:
        async with get_client() as http_client:
            client = DocumentClient(http_client)
            files = await client.list_files(application_id=1)
    """

    def __init__(self, http_client: AsyncClient, upload_timeout: Optional[float] = None):
        self.http_client = http_client
        self.upload_timeout = upload_timeout
        self._base_path = "/applications"

    def _upload_options(self) -> dict[str, float]:
        # Omitting the key keeps the client default; None would disable timeouts
        return {"timeout": self.upload_timeout} if self.upload_timeout else {}

    def _document_path(self, application_id: int, document_id: int) -> str:
        return f"{self._base_path}/{application_id}/documents/{document_id}"

    async def list_files(self, application_id: Optional[int] = None) -> FileListResponse:
        """List documents, optionally restricted to one application."""
        params = {"application_id": application_id} if application_id is not None else None
        response = await call_get(
            self.http_client, f"{self._base_path}/files/list", params=params
        )
        return validate_response(response, FileListResponse)

    async def list_in_folder(
        self, application_id: int, folder_id: Optional[int]
    ) -> List[Document]:
        """Documents directly inside ``folder_id`` (None for the application root).

        The backend only filters by application, the folder filter is applied here.
        """
        listing = await self.list_files(application_id)
        return [doc for doc in listing.files if doc.folder_id == folder_id]

    async def upload_files(
        self,
        files: Sequence[FileSource],
        *,
        application_id: Optional[int] = None,
        company_name: Optional[str] = None,
    ) -> UploadSummary:
        """Upload one or more files.

        Without ``application_id`` the backend creates a new application named
        ``company_name``.
        """
        data: dict[str, str] = {}
        if application_id is not None:
            data["application_id"] = str(application_id)
        if company_name:
            data["company_name"] = company_name

        parts = [("files", _to_upload_part(source)) for source in files]
        response = await call_post(
            self.http_client,
            f"{self._base_path}/files/upload",
            data=data,
            files=parts,
            **self._upload_options(),
        )
        return validate_response(response, UploadSummary)

    async def upload_single(
        self,
        source: FileSource,
        application_id: int,
        doc_type: Optional[str] = None,
    ) -> UploadSummary:
        """Upload one document into an existing application."""
        data = {"application_id": str(application_id)}
        if doc_type:
            data["doc_type"] = doc_type
        response = await call_post(
            self.http_client,
            f"{self._base_path}/upload/single",
            data=data,
            files={"file": _to_upload_part(source)},
            **self._upload_options(),
        )
        return validate_response(response, UploadSummary)

    async def upload_directory(
        self,
        archive: FileSource,
        company_name: str,
        position: Optional[str] = None,
    ) -> UploadSummary:
        """Upload a zipped directory as a new application."""
        data = {"company_name": company_name}
        if position:
            data["position"] = position
        response = await call_post(
            self.http_client,
            f"{self._base_path}/upload/directory",
            data=data,
            files={"file": _to_upload_part(archive)},
            **self._upload_options(),
        )
        return validate_response(response, UploadSummary)

    async def index_document(self, document_id: int) -> StatusResponse:
        """Ask the backend to parse and embed a document."""
        response = await call_post(self.http_client, f"/documents/{document_id}/index")
        return validate_status(response)

    async def move_document(
        self,
        application_id: int,
        document_id: int,
        target_folder_id: Optional[int] = None,
    ) -> StatusResponse:
        """Move a document to another folder of its application (None = root)."""
        response = await call_post(
            self.http_client,
            f"{self._document_path(application_id, document_id)}/move",
            json={"target_folder_id": target_folder_id},
        )
        return validate_status(response)

    async def delete_document(self, application_id: int, document_id: int) -> StatusResponse:
        response = await call_delete(
            self.http_client, self._document_path(application_id, document_id)
        )
        return validate_status(response)

    async def get_content(self, application_id: int, document_id: int) -> DocumentContent:
        """Fetch the extracted text of a document."""
        response = await call_get(
            self.http_client,
            f"{self._document_path(application_id, document_id)}/content",
        )
        return validate_response(response, DocumentContent)
