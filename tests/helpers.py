"""Builders for local model instances used by unit tests."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from workspace_client.models import Conversation, ConversationType, Project

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_conversation(
    id: str,
    title: str = "New chat",
    minutes: int = 0,
    project_id: Optional[str] = None,
    message_count: int = 0,
    type: ConversationType = ConversationType.TEXT,
    archived: bool = False
) -> Conversation:
    when = BASE_TIME + timedelta(minutes=minutes)
    return Conversation(
        id=id,
        title=title,
        type=type,
        created_at=BASE_TIME,
        updated_at=when,
        message_count=message_count,
        project_id=project_id,
        archived_at=when if archived else None,
    )


def make_project(id: str, count: int = 0, minutes: int = 0) -> Project:
    when = BASE_TIME + timedelta(minutes=minutes)
    return Project(id=id, name=id.title(), created_at=BASE_TIME, updated_at=when, conversation_count=count)


def assert_counts_consistent(state) -> None:
    """Every project count matches its active, referencing conversations."""
    for project in state.projects:
        expected = sum(
            1 for c in state.conversations
            if c.project_id == project.id and c.archived_at is None
        )
        assert project.conversation_count == expected, project.name
