"""Core pydantic models for applications, folders and documents.

These mirror the JSON the backend returns. An application is the root of a
hierarchy: it owns folders (nested through parent_id) and documents, which
sit either at the application root (folder_id is None) or inside a folder
of the same application.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ApplicationStatus(str, Enum):
    """Lifecycle status of a tracked application."""

    UPLOADED = "uploaded"
    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    TECHNICAL_TEST = "technical_test"
    OFFER = "offer"
    REJECTED = "rejected"
    ACCEPTED = "accepted"
    WITHDRAWN = "withdrawn"

    @property
    def label(self) -> str:
        return status_label(self)


def status_label(status: Union[ApplicationStatus, str]) -> str:
    """Display label for a status, including values this client does not know."""
    value = status.value if isinstance(status, ApplicationStatus) else str(status)
    return value.replace("_", " ").title()


class Application(BaseModel):
    """A tracked job application."""

    model_config = ConfigDict(frozen=True)

    id: int
    company_name: str = Field(description="Display name of the application")
    position: Optional[str] = None
    # Statuses added on the backend later are kept as plain strings
    status: Union[ApplicationStatus, str] = Field(
        default=ApplicationStatus.UPLOADED, union_mode="left_to_right"
    )
    document_count: int = 0
    created_at: datetime

    @property
    def display_name(self) -> str:
        if self.position:
            return f"{self.company_name} ({self.position})"
        return self.company_name

    @property
    def status_label(self) -> str:
        return status_label(self.status)


class Folder(BaseModel):
    """A folder inside exactly one application."""

    model_config = ConfigDict(frozen=True)

    id: int
    application_id: int
    name: str
    parent_id: Optional[int] = None  # None means child of the application root
    path: Optional[str] = None  # Backend computed, e.g. "Resumes/Old"
    level: int = 0
    created_at: datetime

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class Document(BaseModel):
    """An uploaded file belonging to an application."""

    model_config = ConfigDict(frozen=True)

    id: int
    application_id: int
    folder_id: Optional[int] = None  # None means application root
    filename: str
    doc_type: Optional[str] = None
    indexed: bool = False
    created_at: datetime
