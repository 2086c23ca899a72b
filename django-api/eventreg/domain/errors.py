"""Domain error codes for the registration module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Stable machine-readable rejection codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_FULL = "EVENT_FULL"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_REQUEST = "INVALID_REQUEST"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class EventFullError(DomainError):
    """Raised when an event had no seats left before the request."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_FULL,
            message="Event has reached maximum capacity",
        )
        self.event_id = event_id


class DuplicateRegistrationError(DomainError):
    """Raised when the attendee email is already registered for the event."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_REGISTRATION,
            message="This email is already registered for this event",
        )
        self.event_id = event_id


class InvalidEmailError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EMAIL,
            message="Please provide a valid email address",
        )


class InvalidRequestError(DomainError):
    """Raised for malformed input that is not an email problem."""

    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class InsufficientCapacityError(DomainError):
    """Raised when the group does not fit, including a lost capacity race."""

    def __init__(self, event_id: str, requested: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_CAPACITY,
            message="Not enough spots available for group size",
        )
        self.event_id = event_id
        self.requested = requested


class InternalError(DomainError):
    """Raised when the store fails underneath an operation.

    `outcome_unknown` is set when a capacity write timed out and may have
    been applied.
    """

    def __init__(self, message: str = "Internal error", *, outcome_unknown: bool = False) -> None:
        super().__init__(code=ErrorCode.INTERNAL_ERROR, message=message)
        self.outcome_unknown = outcome_unknown
