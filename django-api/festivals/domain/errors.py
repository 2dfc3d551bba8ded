"""Domain error codes for the festivals module."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Raised when an entity id does not resolve."""

    def __init__(self, kind: str, entity_id: object) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=f"{kind} does not exist",
        )
        self.kind = kind
        self.entity_id = entity_id


class ForbiddenError(DomainError):
    """Raised when a role or ownership guard fails."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class InvalidTransitionError(DomainError):
    """Raised when an entity (or its parent festival) is in the wrong phase."""

    def __init__(self, action: str, current_phase: Enum, message: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=message,
            details={"action": action, "current_phase": current_phase.value},
        )
        self.action = action
        self.current_phase = current_phase


class ValidationFailedError(DomainError):
    """Raised when a required payload field is missing or malformed."""

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message=message,
            details={"field": field_name} if field_name else {},
        )
        self.field = field_name


class ConflictError(DomainError):
    """Raised on a uniqueness violation or a lost compare-and-swap race."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.CONFLICT, message=message)


class AuthenticationError(DomainError):
    """Raised when login credentials do not verify."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.AUTHENTICATION_FAILED,
            message="Invalid username or password",
        )
