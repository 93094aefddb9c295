"""Typed client for report operations.

Encapsulates /applications/reports/*.
"""

from typing import Any, Dict, Sequence

from httpx import AsyncClient

from applytrack.clients.utils import call_get, call_post, read_json, validate_response
from applytrack.schemas.report import CustomColumn, ReportRequest, ReportResult, StatusReport


class ReportClient:
    """Typed client for report operations."""

    def __init__(self, http_client: AsyncClient):
        self.http_client = http_client
        self._base_path = "/applications/reports"

    async def generate(
        self,
        columns: Sequence[str],
        custom_columns: Sequence[CustomColumn] = (),
        provider: str = "ollama",
    ) -> ReportResult:
        """Generate a table with one row per application.

        Args:
            columns: Base columns filled from stored data
            custom_columns: Columns the backend fills by prompting the LLM
            provider: LLM provider for custom columns
        """
        request = ReportRequest(
            columns=list(columns),
            custom_columns=list(custom_columns),
            provider=provider,
        )
        response = await call_post(
            self.http_client,
            f"{self._base_path}/generate",
            json=request.model_dump(),
        )
        return validate_response(response, ReportResult)

    async def status_report(self) -> StatusReport:
        response = await call_get(self.http_client, f"{self._base_path}/status")
        return validate_response(response, StatusReport)

    async def overview_report(self) -> Dict[str, Any]:
        response = await call_get(self.http_client, f"{self._base_path}/overview")
        return read_json(response)
