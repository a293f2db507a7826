"""Optimistic workspace synchronization engine for a conversational chat service."""

from .services.workspace import Workspace

__version__ = "1.0.0"

__all__ = ["Workspace", "__version__"]
