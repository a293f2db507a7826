"""Recency ordering of conversations and projects."""

from typing import Callable, List, Optional, Sequence, TypeVar

from ..models.conversation import (
    Conversation,
    ConversationType,
    DEFAULT_IMAGE_CONVERSATION_TITLE,
    DEFAULT_TEXT_CONVERSATION_TITLE,
)

T = TypeVar("T")

TITLE_MAX_LENGTH = 48
TITLE_TRUNCATE_AT = 45

ConversationUpdater = Callable[[Optional[Conversation]], Conversation]


def default_title_for(type: ConversationType) -> str:
    if type == ConversationType.IMAGE:
        return DEFAULT_IMAGE_CONVERSATION_TITLE
    return DEFAULT_TEXT_CONVERSATION_TITLE


def derive_title(current_title: str, prompt: str, type: ConversationType) -> str:
    """
    Title to show after sending ``prompt``.

    A title the user (or server) already changed is kept. A default title is
    replaced by the trimmed prompt, cut to 45 characters plus "..." when it is
    longer than 48.
    """
    default_title = default_title_for(type)

    if current_title and current_title != default_title:
        return current_title

    trimmed = prompt.strip()
    if not trimmed:
        return default_title

    if len(trimmed) > TITLE_MAX_LENGTH:
        return f"{trimmed[:TITLE_TRUNCATE_AT]}..."
    return trimmed


def promote(
    items: Sequence[Conversation],
    conversation_id: str,
    updater: ConversationUpdater
) -> List[Conversation]:
    """
    Move a conversation to the front, replacing it with ``updater(existing)``.

    ``existing`` is None when the id is not in the list yet. The remaining
    entries keep their relative order; nothing is re-sorted.
    """
    existing = next((item for item in items if item.id == conversation_id), None)
    updated = updater(existing)
    rest = [item for item in items if item.id != conversation_id]
    return [updated, *rest]


def sort_by_updated_at(items: Sequence[T]) -> List[T]:
    """Most recently updated first; stable for equal timestamps."""
    return sorted(items, key=lambda item: item.updated_at, reverse=True)
