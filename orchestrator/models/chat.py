"""Chat session and message models."""

from typing import Literal

from pydantic import BaseModel, Field

ChatRole = Literal["user", "assistant"]


class ChatMessage(BaseModel):
    """A stored message of a chat session."""

    message_id: str
    session_id: str
    role: ChatRole
    content: str
    created_at: str


class ChatSession(BaseModel):
    """A chat session with its messages, oldest first."""

    session_id: str
    title: str
    created_at: str
    updated_at: str
    messages: list[ChatMessage] = Field(default_factory=list)


class ChatSessionSummary(BaseModel):
    """Summary item for listing sessions."""

    session_id: str
    title: str
    created_at: str
    updated_at: str
    message_count: int


class ChatRequestMessage(BaseModel):
    """A message of the history sent by the client with a chat request."""

    role: ChatRole
    content: str
