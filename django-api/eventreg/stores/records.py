"""Persisted item layout.

Events and their registrations share a partition:

    PK = EVENT#<event id>    SK = METADATA                    (the event)
    PK = EVENT#<event id>    SK = REGISTRATION#<reg id>       (one per registration)
"""

from datetime import datetime
from decimal import Decimal

from eventreg.domain import (
    Capacity,
    Category,
    Event,
    EventId,
    Location,
    LocationType,
    Money,
    Pricing,
    Registration,
)
from eventreg.stores.interfaces import PARTITION_KEY, SORT_KEY, Item

EVENT_PREFIX = "EVENT#"
METADATA = "METADATA"
REGISTRATION_PREFIX = "REGISTRATION#"

# Dotted path of the only mutable attribute in the keyspace
REGISTERED_FIELD = "capacity.registered"


def event_partition_key(event_id: EventId | str) -> str:
    return f"{EVENT_PREFIX}{event_id}"


def registration_sort_key(registration_id: str) -> str:
    return f"{REGISTRATION_PREFIX}{registration_id}"


def event_from_item(item: Item) -> Event:
    category = item["category"]
    capacity = item["capacity"]
    location = item["location"]
    return Event(
        id=EventId(item[PARTITION_KEY].removeprefix(EVENT_PREFIX)),
        title=item["title"],
        description=item.get("description", ""),
        date=item["date"],
        category=Category(
            id=category["id"],
            name=category.get("name", ""),
            color=category.get("color", ""),
        ),
        capacity=Capacity(
            maximum=int(capacity["max"]),
            registered=int(capacity["registered"]),
        ),
        pricing=Pricing(individual=Money(Decimal(str(item["pricing"]["individual"])))),
        location=Location(
            type=LocationType(location["type"]),
            address=location.get("address"),
        ),
    )


def event_to_item(event: Event) -> Item:
    location: dict[str, str] = {"type": event.location.type.value}
    if event.location.address is not None:
        location["address"] = event.location.address
    return {
        PARTITION_KEY: event_partition_key(event.id),
        SORT_KEY: METADATA,
        "title": event.title,
        "description": event.description,
        "date": event.date,
        "category": {
            "id": event.category.id,
            "name": event.category.name,
            "color": event.category.color,
        },
        "capacity": {
            "max": event.capacity.maximum,
            "registered": event.capacity.registered,
        },
        "pricing": {"individual": event.pricing.individual.amount},
        "location": location,
    }


def registration_from_item(item: Item) -> Registration:
    return Registration(
        registration_id=item[SORT_KEY].removeprefix(REGISTRATION_PREFIX),
        event_id=EventId(item[PARTITION_KEY].removeprefix(EVENT_PREFIX)),
        attendee_email=item["attendeeEmail"],
        attendee_name=item["attendeeName"],
        group_size=int(item["groupSize"]),
        registered_at=datetime.fromisoformat(item["registeredAt"]),
    )


def registration_to_item(registration: Registration) -> Item:
    return {
        PARTITION_KEY: event_partition_key(registration.event_id),
        SORT_KEY: registration_sort_key(registration.registration_id),
        "attendeeEmail": registration.attendee_email,
        "attendeeName": registration.attendee_name,
        "groupSize": registration.group_size,
        "registeredAt": registration.registered_at.isoformat(),
    }
