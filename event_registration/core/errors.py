"""Domain error codes for the event registration service."""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    EVENT_FULL = "EVENT_FULL"
    EVENT_CANCELLED = "EVENT_CANCELLED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainError(Exception):
    """Base domain error with code, user-safe message and HTTP status."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, detail: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationFailedError(DomainError):
    """Raised when input is malformed, missing or out of range."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    code = ErrorCode.EVENT_NOT_FOUND
    status_code = 404

    def __init__(self, event_id: int) -> None:
        super().__init__("Event not found")
        self.event_id = event_id


class RegistrationNotFoundError(DomainError):
    """Raised when a registration is not found."""

    code = ErrorCode.REGISTRATION_NOT_FOUND
    status_code = 404

    def __init__(self, registration_id: int) -> None:
        super().__init__("Registration not found")
        self.registration_id = registration_id


class CapacityExceededError(DomainError):
    """Raised when an event has no free participant slot."""

    code = ErrorCode.EVENT_FULL
    status_code = 409

    def __init__(self, event_id: int, max_participants: Optional[int] = None) -> None:
        super().__init__(
            "Event is full",
            detail={"eventId": event_id, "maxParticipants": max_participants},
        )
        self.event_id = event_id


class EventCancelledError(DomainError):
    """Raised when registering against a cancelled event."""

    code = ErrorCode.EVENT_CANCELLED
    status_code = 409

    def __init__(self, event_id: int) -> None:
        super().__init__(
            "Cannot register for cancelled event", detail={"eventId": event_id}
        )
        self.event_id = event_id


class InternalFailureError(DomainError):
    """Raised when the store is unavailable or an operation cannot complete."""

    code = ErrorCode.INTERNAL_ERROR
    status_code = 500
