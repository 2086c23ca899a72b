"""Pytest configuration and shared fixtures."""

import typing as t
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from eventreg.domain import Capacity, Category, Event, EventId, Location, LocationType, Money, Pricing
from eventreg.stores.interfaces import ItemStore
from eventreg.stores.memory_store import InMemoryItemStore
from eventreg.stores.records import event_to_item


def make_event(
    event_id: str = "evt-1",
    *,
    maximum: int = 10,
    registered: int = 0,
    category: str = "technology",
    title: str = "PyCon Meetup",
    description: str = "An evening of Python talks",
) -> Event:
    return Event(
        id=EventId(event_id),
        title=title,
        description=description,
        date="2026-11-20T18:00:00Z",
        category=Category(id=category, name=category.title(), color="#3366ff"),
        capacity=Capacity(maximum=maximum, registered=registered),
        pricing=Pricing(individual=Money(Decimal("25.00"))),
        location=Location(type=LocationType.PHYSICAL, address="1 Main St"),
    )


def seed(store: ItemStore, *events: Event) -> None:
    for event in events:
        store.put_item(event_to_item(event))


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def memory_store() -> InMemoryItemStore:
    return InMemoryItemStore()


@pytest.fixture
def app_store(memory_store: InMemoryItemStore, monkeypatch: pytest.MonkeyPatch) -> InMemoryItemStore:
    """Route the API's service factories to a fresh in-memory store."""
    monkeypatch.setattr("eventreg.services.get_item_store", lambda: memory_store)
    return memory_store


@pytest.fixture(params=["memory", pytest.param("django", marks=pytest.mark.django_db)])
def store(request: pytest.FixtureRequest) -> t.Iterator[ItemStore]:
    """Every ItemStore backend that runs without external services."""
    if request.param == "django":
        request.getfixturevalue("db")
        from eventreg.stores.django_store import DjangoItemStore

        yield DjangoItemStore()
    else:
        yield InMemoryItemStore()
