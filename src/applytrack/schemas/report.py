"""Schemas for report generation."""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field

ColumnType = Literal["text", "number", "date", "status"]

# Columns the backend can fill without asking the LLM
BASE_COLUMNS = (
    "company_name",
    "position",
    "status",
    "document_count",
    "created_at",
    "updated_at",
    "notes",
)

DEFAULT_BASE_COLUMNS = ("company_name", "position", "status", "document_count")


class CustomColumn(BaseModel):
    """A report column the backend fills by prompting the LLM per application."""

    name: str = Field(min_length=1)
    type: ColumnType = "text"
    prompt: str = Field(min_length=1)


class ReportRequest(BaseModel):
    columns: List[str]
    custom_columns: List[CustomColumn] = Field(default_factory=list)
    provider: str


class ReportResult(BaseModel):
    """Tabular report, one row per application."""

    columns: List[str]
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    total_rows: int = 0


class StatusCount(BaseModel):
    status: str
    count: int


class StatusReport(BaseModel):
    """Distribution of applications over lifecycle statuses."""

    total_applications: int = 0
    status_distribution: List[StatusCount] = Field(default_factory=list)
