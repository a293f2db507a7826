"""Normalized in-memory cache of the workspace."""

from typing import Callable, Dict, Iterable, List, Optional

from ..models.conversation import Conversation
from ..models.message import Message
from ..models.project import Project
from ..models.workspace import WorkspaceState
from ..utils.logger import get_app_logger
from ..utils.signals import Signal

SnapshotListener = Callable[[WorkspaceState], None]


class WorkspaceStore:
    """
    Sole owner of local workspace state.

    Collections are replaced rather than mutated in place, so a published
    snapshot never changes after the fact.
    """

    def __init__(self):
        self.conversations: List[Conversation] = []
        self.archived_conversations: List[Conversation] = []
        self.projects: List[Project] = []
        self.messages_by_conversation: Dict[str, List[Message]] = {}
        self.error_by_conversation: Dict[str, Optional[str]] = {}
        self.active_conversation_id: Optional[str] = None
        self.global_error: Optional[str] = None
        self.is_sending = False
        self.is_loading_conversations = True
        self.is_loading_archived = False
        self._snapshots: Signal[WorkspaceState] = Signal("snapshot")
        self.logger = get_app_logger()

    # === Slots ===
    def ensure(self, conversation_id: str) -> None:
        """Create empty message/error slots for a conversation if missing."""
        if conversation_id not in self.messages_by_conversation:
            self.messages_by_conversation = {**self.messages_by_conversation, conversation_id: []}
        if conversation_id not in self.error_by_conversation:
            self.error_by_conversation = {**self.error_by_conversation, conversation_id: None}

    def get_messages(self, conversation_id: Optional[str]) -> List[Message]:
        if conversation_id is None:
            return []
        return self.messages_by_conversation.get(conversation_id, [])

    def get_error(self, conversation_id: Optional[str]) -> Optional[str]:
        if conversation_id is None:
            return None
        return self.error_by_conversation.get(conversation_id)

    def set_messages(self, conversation_id: str, messages: List[Message]) -> None:
        self.messages_by_conversation = {**self.messages_by_conversation, conversation_id: list(messages)}

    def append_message(self, conversation_id: str, message: Message) -> None:
        self.set_messages(conversation_id, [*self.get_messages(conversation_id), message])

    def set_error(self, conversation_id: str, error: Optional[str]) -> None:
        self.error_by_conversation = {**self.error_by_conversation, conversation_id: error}

    def remove(self, conversation_id: str) -> bool:
        """
        Purge a conversation's message and error slots.

        Returns:
            True if the removed conversation was the active one; the caller
            is responsible for choosing the next selection.
        """
        self.remove_many([conversation_id])
        return self.active_conversation_id == conversation_id

    def remove_many(self, conversation_ids: Iterable[str]) -> None:
        ids = set(conversation_ids)
        if not ids:
            return
        self.messages_by_conversation = {
            key: value for key, value in self.messages_by_conversation.items() if key not in ids
        }
        self.error_by_conversation = {
            key: value for key, value in self.error_by_conversation.items() if key not in ids
        }

    # === Lookups ===
    def find_active(self, conversation_id: str) -> Optional[Conversation]:
        return next((c for c in self.conversations if c.id == conversation_id), None)

    def find_archived(self, conversation_id: str) -> Optional[Conversation]:
        return next((c for c in self.archived_conversations if c.id == conversation_id), None)

    def first_active_id(self) -> Optional[str]:
        return self.conversations[0].id if self.conversations else None

    # === Whole-store ===
    def reset(self) -> None:
        """Forget everything that is known about the workspace."""
        self.conversations = []
        self.archived_conversations = []
        self.projects = []
        self.messages_by_conversation = {}
        self.error_by_conversation = {}
        self.active_conversation_id = None

    def snapshot(self) -> WorkspaceState:
        return WorkspaceState(
            conversations=list(self.conversations),
            archived_conversations=list(self.archived_conversations),
            projects=list(self.projects),
            messages_by_conversation={k: list(v) for k, v in self.messages_by_conversation.items()},
            error_by_conversation=dict(self.error_by_conversation),
            active_conversation_id=self.active_conversation_id,
            global_error=self.global_error,
            is_sending=self.is_sending,
            is_loading_conversations=self.is_loading_conversations,
            is_loading_archived=self.is_loading_archived,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        return self._snapshots.subscribe(listener)

    def publish(self) -> None:
        """Deliver the current snapshot to every listener."""
        if len(self._snapshots):
            self._snapshots.emit(self.snapshot())
