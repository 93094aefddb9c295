"""Chat panel: sends questions about the applications to the assistant."""

from typing import List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from applytrack.clients.chat import ChatClient
from applytrack.clients.documents import DocumentClient
from applytrack.errors import ApplytrackError
from applytrack.schemas.base import Document
from applytrack.schemas.chat import ChatMessage, ChatResponse
from applytrack.state.models import LoadStatus


class ChatState(BaseModel):
    """Latest exchange of the panel. A new reply replaces the previous one."""

    model_config = ConfigDict(frozen=True)

    status: LoadStatus = LoadStatus.IDLE
    message: Optional[str] = None
    response: Optional[ChatResponse] = None
    error: Optional[str] = None
    indexed_document_ids: List[int] = Field(default_factory=list)
    history: List[ChatMessage] = Field(default_factory=list)


class ChatPanel:
    def __init__(
        self,
        chat_client: ChatClient,
        document_client: DocumentClient,
        *,
        provider: str = "ollama",
        pre_index: bool = True,
    ):
        """Initialize the chat panel.

        Args:
            chat_client: Client for the chat endpoints
            document_client: Used to index listed documents before sending
            provider: Default LLM provider
            pre_index: Index listed documents that are not indexed yet before each message
        """
        self.chat_client = chat_client
        self.document_client = document_client
        self.provider = provider
        self.pre_index = pre_index
        self.state = ChatState()

    async def _index_pending(self, documents: Sequence[Document]) -> List[int]:
        """Index the unindexed documents one by one. Failures are skipped."""
        indexed = []
        for document in documents:
            if document.indexed:
                continue
            try:
                await self.document_client.index_document(document.id)
            except ApplytrackError as e:
                logger.warning(f"Could not index {document.filename} before chat: {e}")
                continue
            indexed.append(document.id)
        if indexed:
            logger.info(f"Indexed {len(indexed)} document(s) before chat")
        return indexed

    async def send(
        self,
        message: str,
        provider: Optional[str] = None,
        listed_documents: Sequence[Document] = (),
    ) -> ChatState:
        """Send ``message`` and store the reply."""
        message = message.strip()
        if not message:
            self.state = self.state.model_copy(update={"error": "Message must not be empty"})
            return self.state

        self.state = self.state.model_copy(
            update={"status": LoadStatus.LOADING, "message": message, "error": None}
        )

        indexed: List[int] = []
        if self.pre_index and listed_documents:
            indexed = await self._index_pending(listed_documents)

        try:
            response = await self.chat_client.send_message(message, provider or self.provider)
        except ApplytrackError as e:
            logger.warning(f"Chat request failed: {e}")
            self.state = self.state.model_copy(
                update={
                    "status": LoadStatus.ERROR,
                    "error": f"Chat failed: {e}",
                    "indexed_document_ids": indexed,
                }
            )
            return self.state

        if response.action_taken:
            logger.info(f"Assistant performed action: {response.action_taken}")
        self.state = self.state.model_copy(
            update={
                "status": LoadStatus.LOADED,
                "response": response,
                "indexed_document_ids": indexed,
            }
        )
        return self.state

    async def load_history(self, limit: int = 50) -> List[ChatMessage]:
        try:
            history = await self.chat_client.get_history(limit)
        except ApplytrackError as e:
            logger.warning(f"Failed to load chat history: {e}")
            self.state = self.state.model_copy(update={"error": f"Failed to load history: {e}"})
            return []
        self.state = self.state.model_copy(update={"history": history})
        return history

    async def clear_history(self) -> bool:
        try:
            await self.chat_client.clear_history()
        except ApplytrackError as e:
            logger.warning(f"Failed to clear chat history: {e}")
            self.state = self.state.model_copy(update={"error": f"Failed to clear history: {e}"})
            return False
        self.state = ChatState()
        return True
