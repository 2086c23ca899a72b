from eventreg.domain.models import (
    Category,
    Event,
    EventFilter,
    EventPage,
    Location,
    LocationType,
    Pricing,
    Registration,
    RegistrationResult,
)
from eventreg.domain.value_objects import (
    AttendeeName,
    Capacity,
    EmailAddress,
    EventId,
    EventStatus,
    GroupSize,
    Money,
)

__all__ = [
    "Event",
    "Category",
    "Pricing",
    "Location",
    "LocationType",
    "Registration",
    "RegistrationResult",
    "EventFilter",
    "EventPage",
    "EventId",
    "EventStatus",
    "EmailAddress",
    "AttendeeName",
    "GroupSize",
    "Money",
    "Capacity",
]
