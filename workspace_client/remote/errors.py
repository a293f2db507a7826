"""Failure taxonomy for calls to the remote chat service."""

from enum import Enum
from typing import Optional

from ..models.conversation import ConversationDetail


class FailureKind(str, Enum):
    """Where a remote call went wrong."""

    TRANSPORT = "transport"
    VALIDATION = "validation"
    SERVER = "server"
    UNEXPECTED_RESPONSE = "unexpected_response"


class RequestFailure(Exception):
    """
    A remote call failed.

    Attributes:
        message: Human-readable text, shown to the user as-is
        status: HTTP status code, if a response was received
        kind: Failure category
        conversation: Canonical conversation snapshot attached by the send endpoints
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        kind: FailureKind = FailureKind.SERVER,
        conversation: Optional[ConversationDetail] = None
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.kind = kind
        self.conversation = conversation

    @classmethod
    def from_status(
        cls,
        status: int,
        message: str,
        conversation: Optional[ConversationDetail] = None
    ) -> "RequestFailure":
        kind = FailureKind.VALIDATION if status < 500 else FailureKind.SERVER
        return cls(message, status=status, kind=kind, conversation=conversation)


class UnauthorizedError(RequestFailure):
    """The session is no longer valid (HTTP 401)."""

    def __init__(self, message: str = "Not authenticated."):
        super().__init__(message, status=401, kind=FailureKind.VALIDATION)


def error_text(error: BaseException, fallback: str) -> str:
    """Normalize any failure into the single string stored in an error slot."""
    if isinstance(error, RequestFailure):
        return error.message or fallback
    return str(error) or fallback
