"""Domain error codes and exceptions raised by the service layer."""
from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    DATE_NOT_FOUND = "DATE_NOT_FOUND"
    COMMENT_NOT_FOUND = "COMMENT_NOT_FOUND"
    FAVORITE_NOT_FOUND = "FAVORITE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    NOT_OWNER = "NOT_OWNER"
    NOT_ORGANIZER = "NOT_ORGANIZER"
    FAVORITE_EXISTS = "FAVORITE_EXISTS"
    ALREADY_FOLLOWING = "ALREADY_FOLLOWING"
    INVALID_PAGINATION = "INVALID_PAGINATION"
    INVALID_COMMENT = "INVALID_COMMENT"
    INVALID_FOLLOW = "INVALID_FOLLOW"
    INVALID_IMPORT_FILE = "INVALID_IMPORT_FILE"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ForbiddenError(DomainError):
    """Raised when the caller may not act on an entity."""


class ConflictError(DomainError):
    """Raised when a write would duplicate an existing record."""


class InvalidInputError(DomainError):
    """Raised for caller errors detected before any work is done."""

    def __init__(self, code: ErrorCode, message: str, parameter: Optional[str] = None) -> None:
        super().__init__(code=code, message=message)
        self.parameter = parameter


def event_not_found() -> NotFoundError:
    return NotFoundError(ErrorCode.EVENT_NOT_FOUND, "Evento no encontrado")


def not_owner() -> ForbiddenError:
    return ForbiddenError(ErrorCode.NOT_OWNER, "No autorizado")
