"""In-memory FastAPI stand-in for the remote chat service."""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class StoredConversation:
    id: str
    title: str
    type: str
    created_at: datetime
    updated_at: datetime
    project_id: Optional[str] = None
    archived_at: Optional[datetime] = None
    messages: List[Dict[str, Any]] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
            "messageCount": len(self.messages),
            "projectId": self.project_id,
            "archivedAt": _iso(self.archived_at),
        }

    def detail(self) -> Dict[str, Any]:
        return {**self.summary(), "messages": list(self.messages)}


@dataclass
class StoredProject:
    id: str
    name: str
    created_at: datetime
    updated_at: datetime


class FakeWorkspaceServer:
    """
    Keeps conversations and projects in memory and serves them over the same
    routes as the real service.

    Failures are injected per operation with ``fail(operation, status, message)``
    and consumed by the next matching request.
    """

    def __init__(self):
        self.conversations: Dict[str, StoredConversation] = {}
        self.projects: Dict[str, StoredProject] = {}
        self.failures: Dict[str, Tuple[int, str, bool]] = {}
        self.calls: List[str] = []
        self.chat_gate: Optional[asyncio.Event] = None
        self._clock = BASE_TIME
        self.app = self._build_app()

    # === Test helpers ===
    def tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def fail(self, operation: str, status: int, message: str, with_snapshot: bool = False) -> None:
        self.failures[operation] = (status, message, with_snapshot)

    def seed_conversation(
        self,
        title: str = "New chat",
        type: str = "text",
        project_id: Optional[str] = None,
        archived: bool = False,
        messages: int = 0,
        updated_at: Optional[datetime] = None
    ) -> StoredConversation:
        now = self.tick()
        conversation = StoredConversation(
            id=str(uuid.uuid4()),
            title=title,
            type=type,
            created_at=now,
            updated_at=updated_at or now,
            project_id=project_id,
            archived_at=now if archived else None,
        )
        for index in range(messages):
            conversation.messages.append(
                self._message("user" if index % 2 == 0 else "assistant", f"message {index}")
            )
        self.conversations[conversation.id] = conversation
        return conversation

    def seed_project(self, name: str) -> StoredProject:
        now = self.tick()
        project = StoredProject(id=str(uuid.uuid4()), name=name, created_at=now, updated_at=now)
        self.projects[project.id] = project
        return project

    def active_count(self, project_id: str) -> int:
        return sum(
            1 for c in self.conversations.values()
            if c.project_id == project_id and c.archived_at is None
        )

    # === Serialization ===
    def _message(self, role: str, content: str) -> Dict[str, Any]:
        return {
            "id": str(uuid.uuid4()),
            "role": role,
            "content": content,
            "createdAt": _iso(self.tick()),
        }

    def _project(self, project: StoredProject) -> Dict[str, Any]:
        return {
            "id": project.id,
            "name": project.name,
            "createdAt": _iso(project.created_at),
            "updatedAt": _iso(project.updated_at),
            "conversationCount": self.active_count(project.id),
        }

    def _failure(self, operation: str, conversation_id: Optional[str] = None) -> Optional[JSONResponse]:
        self.calls.append(operation)
        if operation not in self.failures:
            return None
        status, message, with_snapshot = self.failures.pop(operation)
        body: Dict[str, Any] = {"error": message}
        if with_snapshot and conversation_id in self.conversations:
            body["conversation"] = self.conversations[conversation_id].detail()
        return JSONResponse(status_code=status, content=body)

    def _not_found(self, what: str) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": f"{what} not found."})

    # === Routes ===
    def _build_app(self) -> FastAPI:
        app = FastAPI(title="Fake chat service")

        @app.get("/api/projects")
        async def list_projects():
            if failure := self._failure("list_projects"):
                return failure
            projects = sorted(self.projects.values(), key=lambda p: p.updated_at, reverse=True)
            return {"projects": [self._project(p) for p in projects]}

        @app.post("/api/projects", status_code=201)
        async def create_project(request: Request):
            if failure := self._failure("create_project"):
                return failure
            body = await request.json()
            name = (body.get("name") or "").strip()
            if not name:
                return JSONResponse(status_code=400, content={"error": "Project name is required."})
            project = self.seed_project(name)
            return {"project": self._project(project)}

        @app.delete("/api/projects")
        async def delete_all_projects():
            if failure := self._failure("delete_all_projects"):
                return failure
            deleted = len(self.projects)
            for conversation_id in [c.id for c in self.conversations.values() if c.project_id]:
                del self.conversations[conversation_id]
            self.projects.clear()
            return {"deleted": deleted}

        @app.patch("/api/projects/{project_id}")
        async def rename_project(project_id: str, request: Request):
            if failure := self._failure("rename_project"):
                return failure
            project = self.projects.get(project_id)
            if project is None:
                return self._not_found("Project")
            body = await request.json()
            project.name = body["name"].strip()
            project.updated_at = self.tick()
            return {"project": self._project(project)}

        @app.delete("/api/projects/{project_id}")
        async def delete_project(project_id: str):
            if failure := self._failure("delete_project"):
                return failure
            if project_id not in self.projects:
                return self._not_found("Project")
            del self.projects[project_id]
            for conversation_id in [c.id for c in self.conversations.values() if c.project_id == project_id]:
                del self.conversations[conversation_id]
            return Response(status_code=204)

        @app.get("/api/conversations")
        async def list_conversations():
            if failure := self._failure("list_conversations"):
                return failure
            active = [c for c in self.conversations.values() if c.archived_at is None]
            return {"conversations": [c.summary() for c in active]}

        @app.get("/api/conversations/archived")
        async def list_archived():
            if failure := self._failure("list_archived"):
                return failure
            archived = sorted(
                (c for c in self.conversations.values() if c.archived_at is not None),
                key=lambda c: c.archived_at,
                reverse=True,
            )
            return {"conversations": [c.summary() for c in archived]}

        @app.delete("/api/conversations/archived")
        async def delete_archived():
            if failure := self._failure("delete_archived"):
                return failure
            ids = [c.id for c in self.conversations.values() if c.archived_at is not None]
            for conversation_id in ids:
                del self.conversations[conversation_id]
            return {"deleted": len(ids)}

        @app.post("/api/conversations", status_code=201)
        async def create_conversation(request: Request):
            if failure := self._failure("create_conversation"):
                return failure
            body = await request.json() if await request.body() else {}
            type = body.get("type") or "text"
            title = "New image chat" if type == "image" else "New chat"
            conversation = self.seed_conversation(title=title, type=type)
            return {"conversation": conversation.summary()}

        @app.delete("/api/conversations")
        async def delete_all_conversations():
            if failure := self._failure("delete_all_conversations"):
                return failure
            ids = [c.id for c in self.conversations.values() if c.archived_at is None]
            for conversation_id in ids:
                del self.conversations[conversation_id]
            return {"deleted": len(ids)}

        @app.get("/api/conversations/{conversation_id}")
        async def get_conversation(conversation_id: str):
            if failure := self._failure("get_conversation"):
                return failure
            conversation = self.conversations.get(conversation_id)
            if conversation is None:
                return self._not_found("Conversation")
            return {"conversation": conversation.detail()}

        @app.patch("/api/conversations/{conversation_id}")
        async def update_conversation(conversation_id: str, request: Request):
            if failure := self._failure("update_conversation"):
                return failure
            conversation = self.conversations.get(conversation_id)
            if conversation is None:
                return self._not_found("Conversation")
            body = await request.json()
            if "title" in body:
                conversation.title = body["title"]
            if "projectId" in body:
                project_id = body["projectId"]
                if project_id is not None and project_id not in self.projects:
                    return self._not_found("Project")
                conversation.project_id = project_id
            conversation.updated_at = self.tick()
            return {"conversation": conversation.summary()}

        @app.delete("/api/conversations/{conversation_id}")
        async def delete_conversation(conversation_id: str):
            if failure := self._failure("delete_conversation"):
                return failure
            if self.conversations.pop(conversation_id, None) is None:
                return self._not_found("Conversation")
            return Response(status_code=204)

        @app.post("/api/conversations/{conversation_id}/archive")
        async def archive(conversation_id: str):
            if failure := self._failure("archive"):
                return failure
            conversation = self.conversations.get(conversation_id)
            if conversation is None:
                return self._not_found("Conversation")
            conversation.archived_at = self.tick()
            return {"conversation": conversation.summary()}

        @app.post("/api/conversations/{conversation_id}/unarchive")
        async def unarchive(conversation_id: str):
            if failure := self._failure("unarchive"):
                return failure
            conversation = self.conversations.get(conversation_id)
            if conversation is None:
                return self._not_found("Conversation")
            conversation.archived_at = None
            conversation.updated_at = self.tick()
            return {"conversation": conversation.summary()}

        async def _chat(operation: str, request: Request, reply) -> Any:
            body = await request.json()
            conversation = self.conversations.get(body.get("conversationId"))
            if conversation is None:
                return self._not_found("Conversation")
            if self.chat_gate is not None:
                await self.chat_gate.wait()

            prompt = body["prompt"].strip()
            if conversation.title in ("New chat", "New image chat"):
                conversation.title = prompt if len(prompt) <= 48 else f"{prompt[:45]}..."
            conversation.messages.append(self._message("user", prompt))
            if failure := self._failure(operation, conversation.id):
                return failure
            conversation.messages.append(self._message("assistant", reply(prompt)))
            conversation.updated_at = self.tick()
            return {"conversation": conversation.detail()}

        @app.post("/api/chat")
        async def send_text(request: Request):
            return await _chat("chat", request, lambda prompt: f"Echo: {prompt}")

        @app.post("/api/chat/image")
        async def generate_image(request: Request):
            return await _chat("image", request, lambda prompt: "data:image/png;base64,iVBORw0KGgo=")

        return app
