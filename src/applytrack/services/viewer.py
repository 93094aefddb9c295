"""Document viewer: loads the extracted text of one document at a time."""

from typing import Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict

from applytrack.clients.documents import DocumentClient
from applytrack.errors import ApplytrackError
from applytrack.schemas.base import Document
from applytrack.state.models import LoadStatus

EMPTY_CONTENT_PLACEHOLDER = "No content available"


class ViewerState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: LoadStatus = LoadStatus.IDLE
    document: Optional[Document] = None
    content: Optional[str] = None
    error: Optional[str] = None

    @property
    def text(self) -> str:
        """Content to display. Documents without extracted text get a placeholder."""
        if self.status != LoadStatus.LOADED:
            return ""
        return self.content or EMPTY_CONTENT_PLACEHOLDER


class DocumentViewer:
    """Shows one document. Opening another supersedes the pending load."""

    def __init__(self, document_client: DocumentClient):
        self.document_client = document_client
        self.state = ViewerState()
        self._generation = 0

    async def open(self, document: Document) -> ViewerState:
        self._generation += 1
        generation = self._generation
        self.state = ViewerState(status=LoadStatus.LOADING, document=document)

        try:
            result = await self.document_client.get_content(document.application_id, document.id)
        except ApplytrackError as e:
            if generation != self._generation:
                logger.debug(f"Discarding stale viewer failure for document {document.id}")
                return self.state
            logger.warning(f"Failed to load document {document.id}: {e}")
            self.state = ViewerState(
                status=LoadStatus.ERROR,
                document=document,
                error=f"Failed to load document: {e}",
            )
            return self.state

        if generation != self._generation:
            logger.debug(f"Discarding stale content for document {document.id}")
            return self.state

        self.state = ViewerState(
            status=LoadStatus.LOADED, document=document, content=result.content
        )
        return self.state

    def close(self) -> ViewerState:
        # Bump so a load still in flight cannot reopen the viewer
        self._generation += 1
        self.state = ViewerState()
        return self.state
