"""Message models."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import Field

from .base import WireModel


class MessageRole(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(WireModel):
    """Single message inside a conversation, ordered by creation."""

    id: str = Field(description="Message ID")
    role: MessageRole = Field(description="Message role (user/assistant/system)")
    content: str = Field(description="Message content; image replies are data URIs")
    created_at: datetime = Field(description="Creation timestamp")

    @classmethod
    def local(cls, role: MessageRole, content: str, now: Optional[datetime] = None) -> "Message":
        """Build a message with a locally generated id, before the server has seen it."""
        return cls(
            id=str(uuid.uuid4()),
            role=role,
            content=content,
            created_at=now or datetime.now(timezone.utc)
        )
