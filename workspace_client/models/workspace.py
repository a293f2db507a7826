"""Immutable snapshot of the local workspace cache."""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .conversation import Conversation
from .message import Message
from .project import Project


class WorkspaceState(BaseModel):
    """State handed to snapshot listeners after every store change."""

    model_config = ConfigDict(frozen=True)

    conversations: List[Conversation] = Field(default_factory=list, description="Active conversations, most recent first")
    archived_conversations: List[Conversation] = Field(default_factory=list, description="Archived conversations, most recent first")
    projects: List[Project] = Field(default_factory=list)
    messages_by_conversation: Dict[str, List[Message]] = Field(default_factory=dict)
    error_by_conversation: Dict[str, Optional[str]] = Field(default_factory=dict)
    active_conversation_id: Optional[str] = None
    global_error: Optional[str] = None
    is_sending: bool = False
    is_loading_conversations: bool = True
    is_loading_archived: bool = False

    @property
    def messages(self) -> List[Message]:
        """Messages of the active conversation."""
        if self.active_conversation_id is None:
            return []
        return self.messages_by_conversation.get(self.active_conversation_id, [])

    @property
    def error(self) -> Optional[str]:
        """Error slot of the active conversation."""
        if self.active_conversation_id is None:
            return None
        return self.error_by_conversation.get(self.active_conversation_id)

    @property
    def active_conversation(self) -> Optional[Conversation]:
        for conversation in self.conversations:
            if conversation.id == self.active_conversation_id:
                return conversation
        return None
