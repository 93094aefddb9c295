"""Typed client for the chat endpoints.

Encapsulates /applications/chat/*.
"""

from typing import List

from httpx import AsyncClient
from pydantic import TypeAdapter

from applytrack.clients.utils import (
    call_delete,
    call_get,
    call_post,
    validate_response,
    validate_status,
)
from applytrack.schemas.chat import ChatMessage, ChatRequest, ChatResponse
from applytrack.schemas.response import StatusResponse

_history_adapter = TypeAdapter(List[ChatMessage])


class ChatClient:
    """Typed client for chat operations.

    Usage:
        async with get_client() as http_client:
            client = ChatClient(http_client)
            reply = await client.send_message("Which interviews are next week?")
    """

    def __init__(self, http_client: AsyncClient):
        self.http_client = http_client
        self._base_path = "/applications/chat"

    async def send_message(self, message: str, provider: str = "ollama") -> ChatResponse:
        """Send a message to the assistant.

        Raises:
            RemoteStoreError: If the request fails
        """
        request = ChatRequest(message=message, provider=provider)
        response = await call_post(
            self.http_client,
            f"{self._base_path}/message",
            json=request.model_dump(),
        )
        return validate_response(response, ChatResponse)

    async def get_history(self, limit: int = 50) -> List[ChatMessage]:
        response = await call_get(
            self.http_client, f"{self._base_path}/history", params={"limit": limit}
        )
        return validate_response(response, _history_adapter)

    async def clear_history(self) -> StatusResponse:
        response = await call_delete(self.http_client, f"{self._base_path}/history")
        return validate_status(response)
