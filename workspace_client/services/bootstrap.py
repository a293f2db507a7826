"""Workspace startup and lazy hydration of message lists."""

import asyncio
from typing import Optional

from ..remote.base import BaseWorkspaceService
from ..remote.errors import RequestFailure, error_text
from ..utils.cancellation import CancellationToken
from ..utils.logger import get_app_logger
from .ordering import promote, sort_by_updated_at
from .store import WorkspaceStore

BOOTSTRAP_ERROR = "Failed to load conversations."
HYDRATE_ERROR = "Failed to load conversation."


class BootstrapLoader:
    """Seeds the store once per workspace and fills message lists on demand."""

    def __init__(self, store: WorkspaceStore, service: BaseWorkspaceService):
        self.store = store
        self.service = service
        self.logger = get_app_logger()
        self._started = False

    async def load(self, token: CancellationToken) -> None:
        """
        Load projects and conversations, creating a default conversation
        when the workspace is empty.

        Any failure leaves the store empty with a global error; partial
        results are never kept.

        Raises:
            RuntimeError: If called twice on the same loader
        """
        if self._started:
            raise RuntimeError("Workspace bootstrap already ran")
        self._started = True

        store = self.store
        store.is_loading_conversations = True
        store.publish()

        try:
            projects, conversations = await asyncio.gather(
                self.service.list_projects(),
                self.service.list_conversations(),
            )
            if token.cancelled:
                return

            store.projects = list(projects)

            if not conversations:
                conversation = await self.service.create_conversation()
                if token.cancelled:
                    return

                store.conversations = [conversation]
                store.active_conversation_id = conversation.id
                store.messages_by_conversation = {conversation.id: []}
                store.error_by_conversation = {conversation.id: None}
                self.logger.info(f"Empty workspace, created default conversation {conversation.id}")
            else:
                store.conversations = sort_by_updated_at(conversations)
                for conversation in store.conversations:
                    store.ensure(conversation.id)
                if store.active_conversation_id is None:
                    store.active_conversation_id = store.first_active_id()
                self.logger.info(
                    f"Loaded {len(conversations)} conversation(s) and {len(projects)} project(s)"
                )

            store.global_error = None
        except RequestFailure as e:
            if token.cancelled:
                return
            message = error_text(e, BOOTSTRAP_ERROR)
            self.logger.error(f"Workspace bootstrap failed: {message}")
            store.reset()
            store.global_error = message
        finally:
            if not token.cancelled:
                store.is_loading_conversations = False
                store.publish()

        if not token.cancelled and store.active_conversation_id is not None:
            await self.hydrate(store.active_conversation_id, token)

    async def hydrate(self, conversation_id: str, token: CancellationToken) -> None:
        """
        Fetch the full message list of the active conversation if only its
        summary is known locally.
        """
        store = self.store
        if store.active_conversation_id != conversation_id or store.is_loading_conversations:
            return

        store.ensure(conversation_id)

        summary = store.find_active(conversation_id)
        if summary is None or summary.message_count == 0 or store.get_messages(conversation_id):
            return

        self.logger.debug(f"Hydrating conversation {conversation_id}")
        try:
            detail = await self.service.get_conversation(conversation_id)
        except RequestFailure as e:
            if token.cancelled:
                return
            message = error_text(e, HYDRATE_ERROR)
            self.logger.warning(f"Failed to hydrate conversation {conversation_id}: {message}")
            store.set_error(conversation_id, message)
            store.publish()
            return

        if token.cancelled:
            return

        store.set_messages(detail.id, detail.messages)
        store.conversations = promote(store.conversations, detail.id, lambda _: detail.summary())
        store.set_error(detail.id, None)
        store.publish()
