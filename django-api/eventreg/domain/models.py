"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
The persisted item layout lives in eventreg/stores/records.py.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from eventreg.domain.value_objects import Capacity, EventId, EventStatus, Money


class LocationType(Enum):
    PHYSICAL = "physical"
    ONLINE = "online"


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: str


@dataclass(frozen=True)
class Pricing:
    individual: Money


@dataclass(frozen=True)
class Location:
    type: LocationType
    address: str | None = None


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    description: str
    date: str
    category: Category
    capacity: Capacity
    pricing: Pricing
    location: Location

    @property
    def status(self) -> EventStatus:
        return EventStatus.of(self.capacity)


@dataclass(frozen=True)
class Registration:
    """Domain representation of a Registration. Immutable once written."""

    registration_id: str
    event_id: EventId
    attendee_email: str
    attendee_name: str
    group_size: int
    registered_at: datetime


@dataclass(frozen=True)
class EventFilter:
    """Post-retrieval filters for the catalog listing."""

    category: str | None = None
    search: str | None = None
    status: EventStatus | None = None

    def matches(self, event: Event) -> bool:
        if self.category and event.category.id != self.category:
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in event.title.lower() and needle not in event.description.lower():
                return False
        if self.status is not None and event.status is not self.status:
            return False
        return True


@dataclass(frozen=True)
class EventPage:
    """One page of catalog results. `total` counts this page only."""

    events: tuple[Event, ...]
    next_token: str | None = None

    @property
    def total(self) -> int:
        return len(self.events)


@dataclass(frozen=True)
class RegistrationResult:
    registration: Registration
    event: Event
