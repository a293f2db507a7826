"""JSON-over-HTTP implementation of the remote chat service."""

from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..models.conversation import Conversation, ConversationDetail, ConversationType
from ..models.project import Project
from ..utils.logger import get_app_logger
from .base import BaseWorkspaceService, UNSET
from .errors import FailureKind, RequestFailure, UnauthorizedError

ModelT = TypeVar("ModelT", bound=BaseModel)


class HttpWorkspaceService(BaseWorkspaceService):
    """Talks to the chat service REST API through an httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            base_url: Service root, e.g. http://localhost:3000
            timeout: Transport timeout in seconds (ignored when client is given)
            client: Pre-built client; the caller keeps ownership of it
        """
        super().__init__()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self.logger = get_app_logger()

    @classmethod
    def from_settings(cls, settings) -> "HttpWorkspaceService":
        return cls(base_url=settings.api_base_url, timeout=settings.request_timeout)

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    # === Transport ===
    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Perform a request and return the decoded JSON body (None when empty).

        Raises:
            UnauthorizedError: On HTTP 401, after emitting the unauthorized signal
            RequestFailure: On transport errors, non-2xx responses or invalid JSON
        """
        try:
            response = await self.client.request(method, path, json=json)
        except httpx.HTTPError as e:
            self.logger.warning(f"{method} {path} transport failure: {e}")
            raise RequestFailure(
                str(e) or "Unable to reach the server.",
                kind=FailureKind.TRANSPORT
            ) from e

        if response.status_code == 401:
            self.logger.info(f"{method} {path} returned 401, session expired")
            self.unauthorized.emit(None)
            raise UnauthorizedError(self._error_message(response) or "Not authenticated.")

        if response.is_error:
            message = self._error_message(response) or f"Request failed with status {response.status_code}."
            self.logger.warning(f"{method} {path} failed with {response.status_code}: {message}")
            raise RequestFailure.from_status(
                response.status_code,
                message,
                conversation=self._error_conversation(response)
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise RequestFailure(
                "Unexpected response from server.",
                status=response.status_code,
                kind=FailureKind.UNEXPECTED_RESPONSE
            ) from e

        if not isinstance(data, dict):
            raise RequestFailure(
                "Unexpected response from server.",
                status=response.status_code,
                kind=FailureKind.UNEXPECTED_RESPONSE
            )
        return data

    @staticmethod
    def _error_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _error_message(self, response: httpx.Response) -> Optional[str]:
        message = self._error_body(response).get("error")
        return message if isinstance(message, str) and message else None

    def _error_conversation(self, response: httpx.Response) -> Optional[ConversationDetail]:
        snapshot = self._error_body(response).get("conversation")
        if not snapshot:
            return None
        try:
            return ConversationDetail.model_validate(snapshot)
        except ValidationError:
            self.logger.warning("Ignoring malformed conversation snapshot in error response")
            return None

    @staticmethod
    def _parse(model: Type[ModelT], data: Optional[Dict[str, Any]], key: str) -> ModelT:
        """Extract and validate ``data[key]``."""
        if not data or key not in data:
            raise RequestFailure(
                f"Unexpected response from server: missing '{key}'.",
                kind=FailureKind.UNEXPECTED_RESPONSE
            )
        try:
            return model.model_validate(data[key])
        except ValidationError as e:
            raise RequestFailure(
                "Unexpected response from server.",
                kind=FailureKind.UNEXPECTED_RESPONSE
            ) from e

    @staticmethod
    def _parse_list(
        model: Type[ModelT],
        data: Optional[Dict[str, Any]],
        key: str,
        strict: bool = True
    ) -> List[ModelT]:
        """
        Extract and validate the list at ``data[key]``.

        A missing or non-list value is an unexpected response, unless
        ``strict`` is False, in which case it reads as an empty list.
        """
        items = (data or {}).get(key)
        if not isinstance(items, list):
            if not strict:
                return []
            raise RequestFailure(
                f"Unexpected response from server: missing '{key}'.",
                kind=FailureKind.UNEXPECTED_RESPONSE
            )
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as e:
            raise RequestFailure(
                "Unexpected response from server.",
                kind=FailureKind.UNEXPECTED_RESPONSE
            ) from e

    @staticmethod
    def _deleted_count(data: Optional[Dict[str, Any]]) -> int:
        deleted = (data or {}).get("deleted")
        if isinstance(deleted, bool) or not isinstance(deleted, int):
            return 0
        return deleted

    # === Conversations ===
    async def list_conversations(self) -> List[Conversation]:
        data = await self._request("GET", "/api/conversations")
        return self._parse_list(Conversation, data, "conversations")

    async def list_archived_conversations(self) -> List[Conversation]:
        data = await self._request("GET", "/api/conversations/archived")
        return self._parse_list(Conversation, data, "conversations")

    async def create_conversation(self, type: Optional[ConversationType] = None) -> Conversation:
        payload = {"type": ConversationType(type).value} if type else {}
        data = await self._request("POST", "/api/conversations", json=payload)
        return self._parse(Conversation, data, "conversation")

    async def get_conversation(self, conversation_id: str) -> ConversationDetail:
        data = await self._request("GET", f"/api/conversations/{conversation_id}")
        return self._parse(ConversationDetail, data, "conversation")

    async def archive_conversation(self, conversation_id: str) -> Conversation:
        data = await self._request("POST", f"/api/conversations/{conversation_id}/archive")
        return self._parse(Conversation, data, "conversation")

    async def unarchive_conversation(self, conversation_id: str) -> Conversation:
        data = await self._request("POST", f"/api/conversations/{conversation_id}/unarchive")
        return self._parse(Conversation, data, "conversation")

    async def update_conversation(
        self,
        conversation_id: str,
        title=UNSET,
        project_id=UNSET
    ) -> Conversation:
        payload: Dict[str, Any] = {}
        if title is not UNSET:
            payload["title"] = title
        if project_id is not UNSET:
            payload["projectId"] = project_id
        data = await self._request("PATCH", f"/api/conversations/{conversation_id}", json=payload)
        return self._parse(Conversation, data, "conversation")

    async def delete_conversation(self, conversation_id: str) -> None:
        await self._request("DELETE", f"/api/conversations/{conversation_id}")

    async def delete_all_conversations(self) -> int:
        return self._deleted_count(await self._request("DELETE", "/api/conversations"))

    async def delete_archived_conversations(self) -> int:
        return self._deleted_count(await self._request("DELETE", "/api/conversations/archived"))

    # === Messages ===
    async def send_text_message(self, prompt: str, conversation_id: str) -> ConversationDetail:
        data = await self._request(
            "POST", "/api/chat",
            json={"prompt": prompt, "conversationId": conversation_id}
        )
        return self._parse(ConversationDetail, data, "conversation")

    async def generate_image_message(self, prompt: str, conversation_id: str) -> ConversationDetail:
        data = await self._request(
            "POST", "/api/chat/image",
            json={"prompt": prompt, "conversationId": conversation_id}
        )
        return self._parse(ConversationDetail, data, "conversation")

    # === Projects ===
    async def list_projects(self) -> List[Project]:
        data = await self._request("GET", "/api/projects")
        return self._parse_list(Project, data, "projects", strict=False)

    async def create_project(self, name: str) -> Project:
        data = await self._request("POST", "/api/projects", json={"name": name})
        return self._parse(Project, data, "project")

    async def rename_project(self, project_id: str, name: str) -> Project:
        data = await self._request("PATCH", f"/api/projects/{project_id}", json={"name": name})
        return self._parse(Project, data, "project")

    async def delete_project(self, project_id: str) -> None:
        await self._request("DELETE", f"/api/projects/{project_id}")

    async def delete_all_projects(self) -> int:
        return self._deleted_count(await self._request("DELETE", "/api/projects"))
