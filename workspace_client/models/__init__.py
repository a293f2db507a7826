"""Pydantic models for workspace entities, snapshots and commands."""

from .message import Message, MessageRole
from .conversation import (
    Conversation,
    ConversationDetail,
    ConversationType,
    DEFAULT_TEXT_CONVERSATION_TITLE,
    DEFAULT_IMAGE_CONVERSATION_TITLE,
)
from .project import Project
from .workspace import WorkspaceState

__all__ = [
    "Message",
    "MessageRole",
    "Conversation",
    "ConversationDetail",
    "ConversationType",
    "DEFAULT_TEXT_CONVERSATION_TITLE",
    "DEFAULT_IMAGE_CONVERSATION_TITLE",
    "Project",
    "WorkspaceState",
]
