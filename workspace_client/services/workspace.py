"""Command-driven facade over the workspace synchronization engine."""

from typing import Any, Awaitable, Callable, Dict, Optional, Type

from ..models import commands
from ..models.workspace import WorkspaceState
from ..remote.base import BaseWorkspaceService
from ..utils.cancellation import CancellationToken
from ..utils.logger import get_app_logger, init_app_logger
from .bootstrap import BootstrapLoader
from .coordinator import MutationCoordinator
from .store import SnapshotListener, WorkspaceStore

CommandHandler = Callable[[Any], Awaitable[Any]]


class Workspace:
    """
    One user's workspace: receives typed commands, publishes state snapshots.

    The host opens the workspace once, dispatches commands as the user acts,
    subscribes to snapshots for rendering, and registers an unauthorized
    callback to clear its session when any request comes back 401.
    """

    def __init__(self, service: BaseWorkspaceService):
        self.service = service
        self.store = WorkspaceStore()
        self.loader = BootstrapLoader(self.store, service)
        self.coordinator = MutationCoordinator(self.store, service, self.loader)
        self.logger = get_app_logger()
        self._bootstrap_token: Optional[CancellationToken] = None
        self._handlers: Dict[Type[commands.Command], CommandHandler] = self._build_handlers()

    @classmethod
    def from_settings(cls, settings) -> "Workspace":
        """Build a workspace backed by the HTTP service described by settings."""
        from ..remote.http import HttpWorkspaceService

        init_app_logger(settings)
        return cls(HttpWorkspaceService.from_settings(settings))

    def _build_handlers(self) -> Dict[Type[commands.Command], CommandHandler]:
        c = self.coordinator
        return {
            commands.SendMessage: lambda cmd: c.send_message(cmd.text),
            commands.SelectConversation: lambda cmd: c.select_conversation(cmd.conversation_id),
            commands.StartNewConversation: lambda cmd: c.start_new_conversation(cmd.type),
            commands.ResetChat: lambda cmd: c.reset_chat(),
            commands.DeleteConversation: lambda cmd: c.delete_conversation(cmd.conversation_id),
            commands.ArchiveConversation: lambda cmd: c.archive_conversation(cmd.conversation_id),
            commands.UnarchiveConversation: lambda cmd: c.unarchive_conversation(cmd.conversation_id),
            commands.RenameConversation: lambda cmd: c.rename_conversation(cmd.conversation_id, cmd.title),
            commands.AssignConversationToProject: lambda cmd: c.assign_conversation_to_project(
                cmd.conversation_id, cmd.project_id
            ),
            commands.CreateProject: lambda cmd: c.create_project(cmd.name),
            commands.RenameProject: lambda cmd: c.rename_project(cmd.project_id, cmd.name),
            commands.DeleteProject: lambda cmd: c.delete_project(cmd.project_id),
            commands.DeleteAllConversations: lambda cmd: c.delete_all_conversations(),
            commands.DeleteArchivedConversations: lambda cmd: c.delete_archived_conversations(),
            commands.DeleteAllProjects: lambda cmd: c.delete_all_projects(),
            commands.LoadArchivedConversations: lambda cmd: c.load_archived_conversations(),
        }

    # === Lifecycle ===
    async def open(self) -> WorkspaceState:
        """Run the one-time bootstrap and return the resulting snapshot."""
        self._bootstrap_token = CancellationToken()
        self.logger.info("Opening workspace")
        await self.loader.load(self._bootstrap_token)
        return self.state

    async def close(self) -> None:
        """Discard results of in-flight loads and release the transport."""
        if self._bootstrap_token is not None:
            self._bootstrap_token.cancel()
        self.coordinator.cancel_pending()
        await self.service.close()
        self.logger.info("Workspace closed")

    async def __aenter__(self) -> "Workspace":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # === Commands ===
    async def dispatch(self, command: commands.Command) -> Any:
        """
        Run a command to completion.

        Returns:
            Whatever the handler returns (created entity, deleted count, or None)

        Raises:
            ValueError: If the command type is unknown
            RequestFailure: Propagated from operations that re-raise remote failures
        """
        handler = self._handlers.get(type(command))
        if handler is None:
            raise ValueError(f"Unknown command: {type(command).__name__}")
        self.logger.debug(f"Dispatching {type(command).__name__}")
        return await handler(command)

    # === Observation ===
    @property
    def state(self) -> WorkspaceState:
        return self.store.snapshot()

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def on_unauthorized(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register the host's session-expired handler."""
        return self.service.unauthorized.subscribe(lambda _: callback())
