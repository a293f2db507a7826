"""Workspace synchronization services."""

from .store import WorkspaceStore
from .ledger import LedgerDelta, ProjectLedger
from .bootstrap import BootstrapLoader
from .coordinator import MutationCoordinator
from .workspace import Workspace

__all__ = [
    "WorkspaceStore",
    "LedgerDelta",
    "ProjectLedger",
    "BootstrapLoader",
    "MutationCoordinator",
    "Workspace",
]
