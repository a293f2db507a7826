"""Per-project counts of active conversations."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from ..models.conversation import Conversation
from ..models.project import Project


@dataclass(frozen=True)
class LedgerDelta:
    """A conversation left one project's active set and/or joined another's."""

    removed_from_project_id: Optional[str] = None
    added_to_project_id: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return (
            self.removed_from_project_id == self.added_to_project_id
            or (self.removed_from_project_id is None and self.added_to_project_id is None)
        )


class ProjectLedger:
    """Keeps ``Project.conversation_count`` equal to its active, referencing conversations."""

    @staticmethod
    def apply(projects: Sequence[Project], delta: LedgerDelta) -> List[Project]:
        """Return projects with the delta applied; counts never go below zero."""
        if delta.is_noop:
            return list(projects)

        updated = []
        for project in projects:
            count = project.conversation_count
            if project.id == delta.removed_from_project_id:
                count = max(count - 1, 0)
            if project.id == delta.added_to_project_id:
                count += 1
            if count != project.conversation_count:
                project = project.model_copy(update={"conversation_count": count})
            updated.append(project)
        return updated

    @staticmethod
    def removed(project_id: Optional[str]) -> LedgerDelta:
        return LedgerDelta(removed_from_project_id=project_id)

    @staticmethod
    def added(project_id: Optional[str]) -> LedgerDelta:
        return LedgerDelta(added_to_project_id=project_id)

    @staticmethod
    def reassigned(previous_project_id: Optional[str], project_id: Optional[str]) -> LedgerDelta:
        return LedgerDelta(
            removed_from_project_id=previous_project_id,
            added_to_project_id=project_id
        )

    @staticmethod
    def reset_counts(projects: Sequence[Project]) -> List[Project]:
        """Zero every count; the projects themselves survive."""
        return [project.model_copy(update={"conversation_count": 0}) for project in projects]

    @staticmethod
    def drop_project(projects: Sequence[Project], project_id: str) -> List[Project]:
        return [project for project in projects if project.id != project_id]

    @staticmethod
    def cascade(
        conversations: Iterable[Conversation],
        project_ids: Optional[Set[str]] = None
    ) -> Tuple[List[Conversation], List[str]]:
        """
        Split conversations into survivors and ids removed with their project.

        Args:
            conversations: Active or archived list
            project_ids: Projects being deleted; None means every project

        Returns:
            (kept conversations, removed conversation ids)
        """
        kept: List[Conversation] = []
        removed: List[str] = []
        for conversation in conversations:
            if conversation.project_id is None:
                kept.append(conversation)
            elif project_ids is None or conversation.project_id in project_ids:
                removed.append(conversation.id)
            else:
                kept.append(conversation)
        return kept, removed
