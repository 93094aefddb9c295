"""Schemas for the chat endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    provider: str


class ChatResponse(BaseModel):
    """Assistant reply plus whatever the backend did on our behalf."""

    message: str
    action_taken: Optional[Dict[str, Any]] = None
    context_used: List[Dict[str, Any]] = Field(default_factory=list)


class ChatMessage(BaseModel):
    """A stored message from the chat history."""

    id: int
    role: Literal["user", "assistant"]
    content: str
    created_at: datetime
    metadata: Optional[Dict[str, Any]] = None
