"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EVENT_ID_LENGTH = 128


@dataclass(frozen=True)
class EventId:
    """Opaque identifier for an Event."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Event ID must be a non-empty string")
        if len(self.value) > MAX_EVENT_ID_LENGTH:
            raise ValueError("Event ID is too long")
        # '#' separates key segments in the persisted layout
        if "#" in self.value:
            raise ValueError("Event ID cannot contain '#'")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Seat accounting for an event: 0 <= registered <= maximum."""

    maximum: int
    registered: int

    def __post_init__(self) -> None:
        if self.maximum < 0:
            raise ValueError("Capacity cannot be negative")
        if self.registered < 0:
            raise ValueError("Registered count cannot be negative")
        if self.registered > self.maximum:
            raise ValueError("Registered count cannot exceed capacity")

    @property
    def remaining(self) -> int:
        return self.maximum - self.registered

    @property
    def is_full(self) -> bool:
        return self.registered >= self.maximum

    def can_admit(self, group_size: int) -> bool:
        return self.registered + group_size <= self.maximum


class EventStatus(Enum):
    """Availability derived from capacity."""

    AVAILABLE = "available"
    FULL = "full"

    @classmethod
    def of(cls, capacity: Capacity) -> "EventStatus":
        return cls.FULL if capacity.is_full else cls.AVAILABLE


@dataclass(frozen=True)
class EmailAddress:
    """Attendee email, checked against a conservative shape."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not EMAIL_PATTERN.match(self.value):
            raise ValueError("Invalid email address")

    def matches(self, other: str, *, case_sensitive: bool = True) -> bool:
        if case_sensitive:
            return self.value == other
        return self.value.casefold() == other.casefold()

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AttendeeName:
    """Attendee display name, non-empty after trimming."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Attendee name must be a non-empty string")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class GroupSize:
    """Number of seats a single registration takes."""

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; True must not count as one seat
        if isinstance(self.value, bool):
            raise ValueError("Group size must be an integer")
        # JSON clients may send 2.0 for 2
        if isinstance(self.value, float) and self.value.is_integer():
            object.__setattr__(self, "value", int(self.value))
        if not isinstance(self.value, int):
            raise ValueError("Group size must be an integer")
        if self.value < 1:
            raise ValueError("Group size must be a positive integer")
