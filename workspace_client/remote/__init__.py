"""Remote chat service contract and its HTTP implementation."""

from .base import BaseWorkspaceService, UNSET
from .errors import FailureKind, RequestFailure, UnauthorizedError, error_text
from .http import HttpWorkspaceService

__all__ = [
    "BaseWorkspaceService",
    "UNSET",
    "FailureKind",
    "RequestFailure",
    "UnauthorizedError",
    "error_text",
    "HttpWorkspaceService",
]
