"""
Application error taxonomy.

Every error carries two messages:
- public_message: safe to return to the client
- private_message: diagnostic detail (underlying store/token error text), logged only
"""

from enum import Enum
from typing import Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        public_message: Optional[str] = None,
        private_message: Optional[str] = None,
    ):
        self.public_message = public_message or self.default_message
        self.private_message = private_message or self.public_message
        super().__init__(self.private_message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AppError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.public_message == other.public_message
            and self.private_message == other.private_message
        )

    def __hash__(self) -> int:
        return hash((type(self), self.public_message, self.private_message))


class InvalidInput(AppError):
    """Malformed credential material (empty password, unparseable hash)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class AuthErrorKind(str, Enum):
    """Why a bearer token was rejected."""
    MALFORMED = "malformed"
    EXPIRED = "expired"
    SIGNATURE_MISMATCH = "signature_mismatch"


class AuthError(AppError):
    """Token missing, undecodable, expired or not signed by us."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"

    def __init__(
        self,
        kind: AuthErrorKind,
        public_message: Optional[str] = None,
        private_message: Optional[str] = None,
    ):
        self.kind = kind
        super().__init__(public_message, private_message)


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class InconsistentState(AppError):
    """
    A compensating step failed, leaving the user/project link broken.

    The private message names the documents involved so an operator can repair them.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
