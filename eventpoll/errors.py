"""Domain errors raised by the services and mapped to HTTP by the API layer."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    ID_GENERATION_FAILED = "ID_GENERATION_FAILED"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when request input breaks a constraint."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found.")
        self.event_id = event_id


class IdGenerationError(DomainError):
    """Raised when no free event id could be drawn."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            code=ErrorCode.ID_GENERATION_FAILED,
            message="Could not allocate an event id, please try again.",
        )
        self.attempts = attempts
