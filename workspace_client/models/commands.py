"""Typed commands accepted by the workspace."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .conversation import ConversationType


class Command(BaseModel):
    """Base class for every workspace command."""

    model_config = ConfigDict(frozen=True)


class SendMessage(Command):
    text: str = Field(description="Raw user input; trimmed before sending")


class SelectConversation(Command):
    conversation_id: str


class StartNewConversation(Command):
    type: ConversationType = ConversationType.TEXT


class ResetChat(Command):
    pass


class DeleteConversation(Command):
    conversation_id: str


class ArchiveConversation(Command):
    conversation_id: str


class UnarchiveConversation(Command):
    conversation_id: str


class RenameConversation(Command):
    conversation_id: str
    title: str


class AssignConversationToProject(Command):
    conversation_id: str
    project_id: Optional[str] = Field(None, description="Target project; None removes the assignment")


class CreateProject(Command):
    name: str


class RenameProject(Command):
    project_id: str
    name: str


class DeleteProject(Command):
    project_id: str


class DeleteAllConversations(Command):
    pass


class DeleteArchivedConversations(Command):
    pass


class DeleteAllProjects(Command):
    pass


class LoadArchivedConversations(Command):
    pass
