"""Response models for backend endpoints that return more than a bare entity."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from applytrack.schemas.base import Application, Document, Folder


class StatusResponse(BaseModel):
    """Generic acknowledgement returned by mutating endpoints."""

    model_config = ConfigDict(extra="allow")

    status: str = "ok"
    message: Optional[str] = None


class StatusHistoryEntry(BaseModel):
    """One status transition of an application."""

    old_status: Optional[str] = None
    new_status: str
    notes: Optional[str] = None
    changed_at: Optional[datetime] = None


class ApplicationDetail(BaseModel):
    """Documents and status history of one application."""

    model_config = ConfigDict(extra="ignore")

    documents: List[Document] = Field(default_factory=list)
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)


class FileListResponse(BaseModel):
    """Result of /applications/files/list."""

    files: List[Document] = Field(default_factory=list)
    # Only returned when listing without an application filter
    folders: List[Application] = Field(default_factory=list)


class UploadSummary(BaseModel):
    """Result of a multipart upload."""

    model_config = ConfigDict(extra="allow")

    application_id: Optional[int] = None
    uploaded: int = 0
    documents: List[Document] = Field(default_factory=list)
    folders: List[Folder] = Field(default_factory=list)
    message: Optional[str] = None


class DocumentContent(BaseModel):
    """Extracted text of a document."""

    content: Optional[str] = None
