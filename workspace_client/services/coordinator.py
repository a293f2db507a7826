"""Optimistic-then-reconcile mutations of the workspace."""

from datetime import datetime, timezone
from typing import Optional

from ..models.conversation import Conversation, ConversationType
from ..models.message import Message, MessageRole
from ..models.project import Project
from ..remote.base import BaseWorkspaceService
from ..remote.errors import RequestFailure, error_text
from ..utils.cancellation import CancellationToken
from ..utils.logger import get_app_logger
from .bootstrap import BootstrapLoader
from .ledger import ProjectLedger
from .ordering import default_title_for, derive_title, promote, sort_by_updated_at
from .store import WorkspaceStore

SEND_TEXT_ERROR = "Failed to send message."
SEND_IMAGE_ERROR = "Failed to generate image."
CREATE_CONVERSATION_ERROR = "Failed to create conversation."
DELETE_CONVERSATION_ERROR = "Failed to delete conversation."
ARCHIVE_ERROR = "Failed to archive conversation."
UNARCHIVE_ERROR = "Failed to unarchive conversation."
RENAME_CONVERSATION_ERROR = "Failed to rename conversation."
ASSIGN_ERROR = "Failed to update conversation."
LOAD_ARCHIVED_ERROR = "Failed to load archived conversations."
CREATE_PROJECT_ERROR = "Failed to create project."
RENAME_PROJECT_ERROR = "Failed to rename project."
DELETE_PROJECT_ERROR = "Failed to delete project."
DELETE_ALL_CONVERSATIONS_ERROR = "Failed to delete conversations."
DELETE_ARCHIVED_ERROR = "Failed to delete archived conversations."
DELETE_ALL_PROJECTS_ERROR = "Failed to delete projects."


class MutationCoordinator:
    """
    Applies every user action to the store.

    Each mutation follows the same shape: optional optimistic apply, remote
    call, then either reconciliation with the canonical server result or a
    bounded recovery. Send failures land in the conversation's own error
    slot and are never raised; every other remote failure is stored as the
    global error and re-raised to the caller.
    """

    def __init__(
        self,
        store: WorkspaceStore,
        service: BaseWorkspaceService,
        loader: BootstrapLoader
    ):
        self.store = store
        self.service = service
        self.loader = loader
        self.logger = get_app_logger()
        self._hydration_token: Optional[CancellationToken] = None

    # === Selection ===
    async def select_conversation(self, conversation_id: str) -> None:
        """Focus a conversation and load its messages if only the summary is known."""
        if not conversation_id:
            return

        self._activate(conversation_id)
        self.store.global_error = None
        self.store.publish()
        await self._hydrate_active()

    def _activate(self, conversation_id: Optional[str]) -> None:
        if self._hydration_token is not None:
            self._hydration_token.cancel()
            self._hydration_token = None

        if conversation_id is not None:
            self.store.ensure(conversation_id)
        self.store.active_conversation_id = conversation_id

    async def _hydrate_active(self) -> None:
        conversation_id = self.store.active_conversation_id
        if conversation_id is None:
            return

        if self._hydration_token is not None:
            self._hydration_token.cancel()
        token = CancellationToken()
        self._hydration_token = token
        try:
            await self.loader.hydrate(conversation_id, token)
        finally:
            if self._hydration_token is token:
                self._hydration_token = None

    def cancel_pending(self) -> None:
        """Discard the result of any hydration still in flight."""
        if self._hydration_token is not None:
            self._hydration_token.cancel()
            self._hydration_token = None

    def _fail(self, error: RequestFailure, fallback: str, operation: str) -> str:
        message = error_text(error, fallback)
        self.logger.warning(f"{operation} failed: {message}")
        self.store.global_error = message
        self.store.publish()
        return message

    def _succeed(self) -> None:
        self.store.global_error = None
        self.store.publish()

    # === Messages ===
    async def send_message(self, text: str) -> None:
        """
        Send a prompt in the active conversation.

        Only one send may be in flight across the whole workspace. The result
        is applied to the conversation that was active when the send started,
        even if the selection has changed since. On failure the optimistic
        title and message count are left as they are.
        A conversation archived during the send only has its archived summary
        refreshed, and one deleted during the send stays deleted.
        """
        store = self.store
        trimmed = text.strip()

        if (
            not trimmed
            or store.is_sending
            or store.active_conversation_id is None
            or store.is_loading_conversations
        ):
            return

        conversation_id = store.active_conversation_id
        store.ensure(conversation_id)

        current = store.find_active(conversation_id)
        conversation_type = current.type if current else ConversationType.TEXT
        now = datetime.now(timezone.utc)

        store.append_message(conversation_id, Message.local(MessageRole.USER, trimmed, now))
        store.is_sending = True
        store.set_error(conversation_id, None)
        store.global_error = None
        store.conversations = promote(
            store.conversations,
            conversation_id,
            lambda existing: self._optimistic_summary(
                existing, conversation_id, conversation_type, trimmed, now
            )
        )
        store.publish()

        try:
            if conversation_type == ConversationType.IMAGE:
                detail = await self.service.generate_image_message(trimmed, conversation_id)
            else:
                detail = await self.service.send_text_message(trimmed, conversation_id)
        except RequestFailure as e:
            fallback = SEND_IMAGE_ERROR if conversation_type == ConversationType.IMAGE else SEND_TEXT_ERROR
            message = error_text(e, fallback)
            self.logger.warning(f"Send in conversation {conversation_id} failed: {message}")

            # archived or deleted while the send was in flight: no slots to write
            if store.find_active(conversation_id) is not None:
                system_message = Message.local(MessageRole.SYSTEM, message)
                if e.conversation is not None:
                    store.set_messages(conversation_id, [*e.conversation.messages, system_message])
                else:
                    store.append_message(conversation_id, system_message)
                store.set_error(conversation_id, message)
        else:
            if store.find_active(conversation_id) is not None:
                store.set_messages(conversation_id, detail.messages)
                store.set_error(conversation_id, None)
                self._place_summary(detail.summary())
            elif store.find_archived(conversation_id) is not None:
                self._place_summary(detail.summary())
            else:
                self.logger.debug(f"Dropping send result for removed conversation {conversation_id}")
        finally:
            store.is_sending = False
            store.publish()

    @staticmethod
    def _optimistic_summary(
        existing: Optional[Conversation],
        conversation_id: str,
        conversation_type: ConversationType,
        prompt: str,
        now: datetime
    ) -> Conversation:
        if existing is None:
            return Conversation(
                id=conversation_id,
                title=derive_title(default_title_for(conversation_type), prompt, conversation_type),
                type=conversation_type,
                created_at=now,
                updated_at=now,
                message_count=1,
            )

        return existing.model_copy(update={
            "title": derive_title(existing.title, prompt, existing.type),
            "updated_at": now,
            "message_count": existing.message_count + 1,
        })

    # === Conversations ===
    async def start_new_conversation(
        self,
        type: ConversationType = ConversationType.TEXT
    ) -> Optional[Conversation]:
        """Create a conversation on the server and make it active."""
        store = self.store
        try:
            conversation = await self.service.create_conversation(type)
        except RequestFailure as e:
            self._fail(e, CREATE_CONVERSATION_ERROR, "Create conversation")
            return None

        store.conversations = promote(store.conversations, conversation.id, lambda _: conversation)
        store.set_messages(conversation.id, [])
        store.set_error(conversation.id, None)
        self._activate(conversation.id)
        self.logger.info(f"Created conversation {conversation.id} ({conversation.type.value})")
        self._succeed()
        return conversation

    async def reset_chat(self) -> Optional[Conversation]:
        return await self.start_new_conversation(ConversationType.TEXT)

    async def delete_conversation(self, conversation_id: str) -> None:
        """
        Remove a conversation locally, then on the server.

        The local removal is not rolled back if the server call fails.
        """
        if not conversation_id:
            return

        store = self.store
        active_entry = store.find_active(conversation_id)
        was_selected = store.active_conversation_id == conversation_id

        store.conversations = [c for c in store.conversations if c.id != conversation_id]
        store.archived_conversations = [
            c for c in store.archived_conversations if c.id != conversation_id
        ]
        store.remove(conversation_id)

        # archived conversations already left their project's count
        if active_entry is not None and active_entry.project_id:
            store.projects = ProjectLedger.apply(
                store.projects, ProjectLedger.removed(active_entry.project_id)
            )

        if was_selected:
            self._activate(store.first_active_id())
        store.publish()

        try:
            await self.service.delete_conversation(conversation_id)
        except RequestFailure as e:
            self._fail(e, DELETE_CONVERSATION_ERROR, f"Delete conversation {conversation_id}")
            raise
        else:
            self.logger.info(f"Deleted conversation {conversation_id}")
            self._succeed()
        finally:
            if was_selected:
                await self._hydrate_active()

    async def archive_conversation(self, conversation_id: str) -> Optional[Conversation]:
        """Move a conversation to the archived list once the server has archived it."""
        if not conversation_id:
            return None

        store = self.store
        previous = store.find_active(conversation_id)

        try:
            archived = await self.service.archive_conversation(conversation_id)
        except RequestFailure as e:
            self._fail(e, ARCHIVE_ERROR, f"Archive conversation {conversation_id}")
            raise

        was_selected = store.active_conversation_id == conversation_id
        store.conversations = [c for c in store.conversations if c.id != conversation_id]
        store.archived_conversations = [
            archived,
            *(c for c in store.archived_conversations if c.id != conversation_id),
        ]
        store.remove(conversation_id)

        if previous is not None and previous.project_id:
            store.projects = ProjectLedger.apply(
                store.projects, ProjectLedger.removed(previous.project_id)
            )

        if was_selected:
            self._activate(store.first_active_id())

        self.logger.info(f"Archived conversation {conversation_id}")
        self._succeed()

        if was_selected:
            await self._hydrate_active()
        return archived

    async def unarchive_conversation(self, conversation_id: str) -> Optional[Conversation]:
        """Restore an archived conversation to the front of the active list."""
        if not conversation_id:
            return None

        store = self.store
        try:
            conversation = await self.service.unarchive_conversation(conversation_id)
        except RequestFailure as e:
            self._fail(e, UNARCHIVE_ERROR, f"Unarchive conversation {conversation_id}")
            raise

        already_active = store.find_active(conversation.id) is not None
        store.archived_conversations = [
            c for c in store.archived_conversations if c.id != conversation_id
        ]
        store.conversations = promote(store.conversations, conversation.id, lambda _: conversation)
        store.ensure(conversation.id)

        if conversation.project_id and not already_active:
            store.projects = ProjectLedger.apply(
                store.projects, ProjectLedger.added(conversation.project_id)
            )

        self.logger.info(f"Unarchived conversation {conversation_id}")
        self._succeed()
        return conversation

    async def rename_conversation(self, conversation_id: str, title: str) -> Optional[Conversation]:
        trimmed = title.strip()
        if not conversation_id or not trimmed:
            return None

        try:
            conversation = await self.service.update_conversation(conversation_id, title=trimmed)
        except RequestFailure as e:
            self._fail(e, RENAME_CONVERSATION_ERROR, f"Rename conversation {conversation_id}")
            raise

        self._place_summary(conversation)
        self._succeed()
        return conversation

    async def assign_conversation_to_project(
        self,
        conversation_id: str,
        project_id: Optional[str]
    ) -> Optional[Conversation]:
        """Move a conversation into a project, or out of any project with None."""
        if not conversation_id:
            return None

        store = self.store
        try:
            conversation = await self.service.update_conversation(conversation_id, project_id=project_id)
        except RequestFailure as e:
            self._fail(e, ASSIGN_ERROR, f"Assign conversation {conversation_id}")
            raise

        if store.find_archived(conversation.id) is None:
            previous = store.find_active(conversation.id)
            previous_project_id = previous.project_id if previous else None
            store.projects = ProjectLedger.apply(
                store.projects,
                ProjectLedger.reassigned(previous_project_id, conversation.project_id)
            )

        self._place_summary(conversation)
        store.projects = sort_by_updated_at(store.projects)
        self._succeed()
        return conversation

    def _place_summary(self, conversation: Conversation) -> None:
        """Promote a canonical summary, or replace it in place if it is archived."""
        store = self.store
        if store.find_archived(conversation.id) is not None:
            store.archived_conversations = [
                conversation if c.id == conversation.id else c
                for c in store.archived_conversations
            ]
            return
        store.conversations = promote(store.conversations, conversation.id, lambda _: conversation)

    async def load_archived_conversations(self) -> None:
        store = self.store
        store.is_loading_archived = True
        store.publish()

        try:
            archived = await self.service.list_archived_conversations()
        except RequestFailure as e:
            store.global_error = error_text(e, LOAD_ARCHIVED_ERROR)
            self.logger.warning(f"Load archived conversations failed: {store.global_error}")
            raise
        else:
            store.archived_conversations = list(archived)
            store.global_error = None
        finally:
            store.is_loading_archived = False
            store.publish()

    # === Bulk ===
    async def delete_all_conversations(self) -> int:
        """Delete every active conversation; projects survive with zero counts."""
        store = self.store
        try:
            deleted = await self.service.delete_all_conversations()
        except RequestFailure as e:
            self._fail(e, DELETE_ALL_CONVERSATIONS_ERROR, "Delete all conversations")
            raise

        store.conversations = []
        store.messages_by_conversation = {}
        store.error_by_conversation = {}
        self._activate(None)
        store.projects = ProjectLedger.reset_counts(store.projects)

        self.logger.info(f"Deleted {deleted} conversation(s)")
        self._succeed()
        return deleted

    async def delete_archived_conversations(self) -> int:
        store = self.store
        try:
            deleted = await self.service.delete_archived_conversations()
        except RequestFailure as e:
            self._fail(e, DELETE_ARCHIVED_ERROR, "Delete archived conversations")
            raise

        if deleted > 0:
            archived_ids = [c.id for c in store.archived_conversations]
            store.archived_conversations = []
            store.remove_many(archived_ids)

        self.logger.info(f"Deleted {deleted} archived conversation(s)")
        self._succeed()
        return deleted

    async def delete_all_projects(self) -> int:
        """
        Delete every project together with the conversations assigned to one.

        Conversations without a project are left untouched.
        """
        store = self.store
        try:
            deleted = await self.service.delete_all_projects()
        except RequestFailure as e:
            self._fail(e, DELETE_ALL_PROJECTS_ERROR, "Delete all projects")
            raise

        was_selected = self._drop_project_conversations(None)
        store.projects = []

        self.logger.info(f"Deleted {deleted} project(s)")
        self._succeed()

        if was_selected:
            await self._hydrate_active()
        return deleted

    def _drop_project_conversations(self, project_id: Optional[str]) -> bool:
        """
        Remove conversations belonging to ``project_id`` (any project when None)
        from both lists.

        Returns:
            True if the active conversation was among them and a new one was selected
        """
        store = self.store
        project_ids = {project_id} if project_id is not None else None

        store.conversations, removed_active = ProjectLedger.cascade(store.conversations, project_ids)
        store.archived_conversations, removed_archived = ProjectLedger.cascade(
            store.archived_conversations, project_ids
        )
        removed = set(removed_active) | set(removed_archived)
        store.remove_many(removed)

        if store.active_conversation_id in removed:
            self._activate(store.first_active_id())
            return True
        return False

    # === Projects ===
    async def create_project(self, name: str) -> Optional[Project]:
        trimmed = name.strip()
        if not trimmed:
            return None

        store = self.store
        try:
            project = await self.service.create_project(trimmed)
        except RequestFailure as e:
            self._fail(e, CREATE_PROJECT_ERROR, "Create project")
            raise

        store.projects = sort_by_updated_at([project, *store.projects])
        self.logger.info(f"Created project {project.id} ({project.name})")
        self._succeed()
        return project

    async def rename_project(self, project_id: str, name: str) -> Optional[Project]:
        trimmed = name.strip()
        if not project_id or not trimmed:
            return None

        store = self.store
        try:
            project = await self.service.rename_project(project_id, trimmed)
        except RequestFailure as e:
            self._fail(e, RENAME_PROJECT_ERROR, f"Rename project {project_id}")
            raise

        store.projects = sort_by_updated_at(
            [project if item.id == project.id else item for item in store.projects]
        )
        self._succeed()
        return project

    async def delete_project(self, project_id: str) -> None:
        """Delete a project and every conversation assigned to it."""
        if not project_id:
            return

        store = self.store
        try:
            await self.service.delete_project(project_id)
        except RequestFailure as e:
            self._fail(e, DELETE_PROJECT_ERROR, f"Delete project {project_id}")
            raise

        was_selected = self._drop_project_conversations(project_id)
        store.projects = ProjectLedger.drop_project(store.projects, project_id)

        self.logger.info(f"Deleted project {project_id}")
        self._succeed()

        if was_selected:
            await self._hydrate_active()
