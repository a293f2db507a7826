"""Conversation models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import Field

from .base import WireModel
from .message import Message

DEFAULT_TEXT_CONVERSATION_TITLE = "New chat"
DEFAULT_IMAGE_CONVERSATION_TITLE = "New image chat"


class ConversationType(str, Enum):
    """Which completion endpoint a conversation talks to."""

    TEXT = "text"
    IMAGE = "image"


class Conversation(WireModel):
    """Conversation summary as listed by the service."""

    id: str = Field(description="Conversation ID")
    title: str = Field(description="Conversation title")
    type: ConversationType = Field(default=ConversationType.TEXT, description="Conversation type")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")
    message_count: int = Field(default=0, ge=0, description="Number of persisted messages")
    project_id: Optional[str] = Field(default=None, description="Owning project, if any")
    archived_at: Optional[datetime] = Field(default=None, description="Set while the conversation is archived")

    def summary(self) -> "Conversation":
        """Return a plain summary, dropping any detail-only fields."""
        return Conversation.model_validate(
            self.model_dump(include=set(Conversation.model_fields))
        )


class ConversationDetail(Conversation):
    """Conversation summary plus its full message list."""

    messages: List[Message] = Field(default_factory=list, description="Messages in creation order")
