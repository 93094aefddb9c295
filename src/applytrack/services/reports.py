"""Report builder: shapes custom report requests and exports the result."""

import csv
import io
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from applytrack.clients.reports import ReportClient
from applytrack.errors import InvalidReportError
from applytrack.schemas.report import (
    BASE_COLUMNS,
    DEFAULT_BASE_COLUMNS,
    ColumnType,
    CustomColumn,
    ReportResult,
    StatusReport,
)
from applytrack.utils import to_snake_case


class ReportBuilder:
    """Collects the columns of a report and asks the backend to fill them.

    Base columns come from stored application data. Custom columns are filled
    by the backend prompting the LLM once per application.
    """

    def __init__(
        self,
        report_client: ReportClient,
        provider: str = "ollama",
        columns: Iterable[str] = DEFAULT_BASE_COLUMNS,
    ):
        self.report_client = report_client
        self.provider = provider
        self.columns: List[str] = []
        self.custom_columns: List[CustomColumn] = []
        for column in columns:
            self.add_column(column)

    @property
    def column_names(self) -> List[str]:
        """Every column in request order, base columns first."""
        return [*self.columns, *(column.name for column in self.custom_columns)]

    def add_column(self, column: str) -> None:
        if column not in BASE_COLUMNS:
            raise InvalidReportError(
                f"Unknown column '{column}', expected one of: {', '.join(BASE_COLUMNS)}"
            )
        if column in self.columns:
            raise InvalidReportError(f"Column '{column}' is already part of the report")
        self.columns.append(column)

    def toggle_column(self, column: str) -> bool:
        """Add or remove a base column. Returns True if it is selected afterwards."""
        if column in self.columns:
            self.columns.remove(column)
            return False
        self.add_column(column)
        return True

    def add_custom_column(
        self, name: str, prompt: str, type: ColumnType = "text"
    ) -> CustomColumn:
        """Add an LLM filled column. ``name`` is normalized to snake_case."""
        normalized = to_snake_case(name)
        if not normalized:
            raise InvalidReportError(f"Invalid column name: '{name}'")
        if not prompt.strip():
            raise InvalidReportError(f"Column '{normalized}' needs a prompt")
        if normalized in self.column_names:
            raise InvalidReportError(f"Column '{normalized}' is already part of the report")

        column = CustomColumn(name=normalized, type=type, prompt=prompt.strip())
        self.custom_columns.append(column)
        return column

    def remove_custom_column(self, name: str) -> None:
        normalized = to_snake_case(name)
        self.custom_columns = [c for c in self.custom_columns if c.name != normalized]

    async def generate(self, provider: Optional[str] = None) -> ReportResult:
        """Generate the report.

        Raises:
            InvalidReportError: If no column is selected
            RemoteStoreError: If the request fails
        """
        if not self.column_names:
            raise InvalidReportError("Select at least one column")

        provider = provider or self.provider
        logger.info(
            f"Generating report columns={self.columns} "
            f"custom={[c.name for c in self.custom_columns]} provider={provider}"
        )
        return await self.report_client.generate(
            self.columns, self.custom_columns, provider=provider
        )

    async def status_report(self) -> StatusReport:
        return await self.report_client.status_report()

    async def overview_report(self) -> Dict[str, Any]:
        return await self.report_client.overview_report()


def _csv_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return value


def to_csv(report: ReportResult) -> str:
    """Render a report as CSV, header first. Missing cells are empty."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(report.columns)
    for row in report.rows:
        writer.writerow([_csv_value(row.get(column)) for column in report.columns])
    return buffer.getvalue()


def default_report_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"applications_report_{today.isoformat()}.csv"
