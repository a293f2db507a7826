"""Abstract contract of the remote chat service."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.conversation import Conversation, ConversationDetail, ConversationType
from ..models.project import Project
from ..utils.signals import Signal

# Sentinel meaning "leave this field out of the update request"
UNSET = object()


class BaseWorkspaceService(ABC):
    """
    Remote source of truth for conversations, messages and projects.

    Every call raises RequestFailure on failure. A 401 from any call is
    announced once on ``unauthorized`` before UnauthorizedError is raised.
    """

    def __init__(self):
        self.unauthorized: Signal[None] = Signal("unauthorized")

    # === Conversations ===
    @abstractmethod
    async def list_conversations(self) -> List[Conversation]:
        pass

    @abstractmethod
    async def list_archived_conversations(self) -> List[Conversation]:
        pass

    @abstractmethod
    async def create_conversation(self, type: Optional[ConversationType] = None) -> Conversation:
        pass

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> ConversationDetail:
        pass

    @abstractmethod
    async def archive_conversation(self, conversation_id: str) -> Conversation:
        pass

    @abstractmethod
    async def unarchive_conversation(self, conversation_id: str) -> Conversation:
        pass

    @abstractmethod
    async def update_conversation(
        self,
        conversation_id: str,
        title=UNSET,
        project_id=UNSET
    ) -> Conversation:
        """
        Update title and/or project assignment.

        Args:
            conversation_id: Conversation ID
            title: New title, omitted when UNSET
            project_id: New project, None clears it, omitted when UNSET
        """
        pass

    @abstractmethod
    async def delete_conversation(self, conversation_id: str) -> None:
        pass

    @abstractmethod
    async def delete_all_conversations(self) -> int:
        pass

    @abstractmethod
    async def delete_archived_conversations(self) -> int:
        pass

    # === Messages ===
    @abstractmethod
    async def send_text_message(self, prompt: str, conversation_id: str) -> ConversationDetail:
        pass

    @abstractmethod
    async def generate_image_message(self, prompt: str, conversation_id: str) -> ConversationDetail:
        pass

    # === Projects ===
    @abstractmethod
    async def list_projects(self) -> List[Project]:
        pass

    @abstractmethod
    async def create_project(self, name: str) -> Project:
        pass

    @abstractmethod
    async def rename_project(self, project_id: str, name: str) -> Project:
        pass

    @abstractmethod
    async def delete_project(self, project_id: str) -> None:
        pass

    @abstractmethod
    async def delete_all_projects(self) -> int:
        pass

    async def close(self) -> None:
        """Release transport resources."""
        pass
