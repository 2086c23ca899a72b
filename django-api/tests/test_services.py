"""Unit tests for EventCatalog.

These test error handling, filtering and continuation-token paging.
Run with: pytest tests/test_services.py -v
"""

import pytest

from conftest import make_event, seed
from eventreg.domain import EventFilter, EventStatus
from eventreg.domain.errors import EventNotFoundError, InvalidRequestError
from eventreg.services.catalog_service import EventCatalog
from eventreg.services.pagination import decode_token, encode_token


@pytest.fixture
def catalog(memory_store) -> EventCatalog:
    return EventCatalog(memory_store)


def _collect(catalog: EventCatalog, event_filter: EventFilter | None = None, limit: int = 2) -> list[list[str]]:
    pages = []
    token = None
    while True:
        page = catalog.list_events(event_filter, limit=limit, continuation_token=token)
        pages.append([str(event.id) for event in page.events])
        if page.next_token is None:
            return pages
        token = page.next_token


class TestGetEvent:
    def test_get_event_returns_domain_model(self, catalog, memory_store):
        seed(memory_store, make_event("evt-1", maximum=5, registered=2))

        event = catalog.get_event("evt-1")

        assert str(event.id) == "evt-1"
        assert event.capacity.remaining == 3

    def test_get_event_invalid_id_raises_error(self, catalog):
        with pytest.raises(InvalidRequestError):
            catalog.get_event("bad#id")

    def test_get_event_not_found_raises_error(self, catalog):
        with pytest.raises(EventNotFoundError):
            catalog.get_event("missing")


class TestListEvents:
    def test_category_filter_returns_only_that_category(self, catalog, memory_store):
        seed(
            memory_store,
            make_event("a", category="technology"),
            make_event("b", category="music"),
            make_event("c", category="technology"),
        )

        page = catalog.list_events(EventFilter(category="technology"))

        assert [str(e.id) for e in page.events] == ["a", "c"]
        assert all(e.category.id == "technology" for e in page.events)
        assert page.total == 2
        assert page.next_token is None

    def test_available_status_returns_only_events_with_room(self, catalog, memory_store):
        seed(
            memory_store,
            make_event("a", maximum=5, registered=5),
            make_event("b", maximum=5, registered=4),
            make_event("c", maximum=0, registered=0),
        )

        available = catalog.list_events(EventFilter(status=EventStatus.AVAILABLE))
        full = catalog.list_events(EventFilter(status=EventStatus.FULL))

        assert [str(e.id) for e in available.events] == ["b"]
        assert [str(e.id) for e in full.events] == ["a", "c"]

    def test_search_matches_title_or_description(self, catalog, memory_store):
        seed(
            memory_store,
            make_event("a", title="Rust Night", description="Systems talk"),
            make_event("b", title="Data Day", description="Pandas and Polars in PYTHON"),
        )

        page = catalog.list_events(EventFilter(search="python"))

        assert [str(e.id) for e in page.events] == ["b"]

    @pytest.mark.parametrize("limit", [0, 101, -1])
    def test_limit_out_of_range_is_invalid(self, catalog, limit):
        with pytest.raises(InvalidRequestError):
            catalog.list_events(limit=limit)

    def test_tampered_token_is_invalid(self, catalog):
        token = encode_token({"PK": "EVENT#a", "SK": "METADATA"})

        with pytest.raises(InvalidRequestError):
            catalog.list_events(continuation_token=token[:-2] + "xx")

    def test_token_round_trips_store_key(self):
        key = {"PK": "EVENT#a", "SK": "METADATA"}

        assert decode_token(encode_token(key)) == key


class TestPagination:
    def test_pages_are_disjoint_and_cover_everything(self, catalog, memory_store):
        seed(memory_store, *(make_event(f"evt-{i:02d}") for i in range(7)))

        pages = _collect(catalog, limit=3)

        flattened = [event_id for page in pages for event_id in page]
        assert flattened == [f"evt-{i:02d}" for i in range(7)]
        assert len(set(flattened)) == len(flattened)
        assert all(len(page) <= 3 for page in pages)

    def test_overfetched_candidates_are_not_skipped(self, catalog, memory_store):
        # One scan of limit*2 items yields more matches than fit on a page
        seed(memory_store, *(make_event(f"evt-{i}") for i in range(4)))

        first = catalog.list_events(limit=2)
        second = catalog.list_events(limit=2, continuation_token=first.next_token)

        assert [str(e.id) for e in first.events] == ["evt-0", "evt-1"]
        assert [str(e.id) for e in second.events] == ["evt-2", "evt-3"]

    def test_filtered_pagination_covers_all_matches(self, catalog, memory_store):
        events = [make_event(f"evt-{i:02d}", category="music" if i % 3 == 0 else "technology") for i in range(12)]
        seed(memory_store, *events)

        pages = _collect(catalog, EventFilter(category="music"), limit=2)

        assert [event_id for page in pages for event_id in page] == ["evt-00", "evt-03", "evt-06", "evt-09"]

    def test_a_page_can_be_short_while_more_remain(self, catalog, memory_store):
        seed(
            memory_store,
            make_event("a", category="music"),
            make_event("b", category="music"),
            make_event("c", category="technology"),
        )

        first = catalog.list_events(EventFilter(category="technology"), limit=1)

        assert first.events == ()
        assert first.next_token is not None
        second = catalog.list_events(EventFilter(category="technology"), limit=1, continuation_token=first.next_token)
        assert [str(e.id) for e in second.events] == ["c"]

    def test_pages_are_not_a_snapshot(self, catalog, memory_store):
        """Events that fill up between calls drop out of later filtered pages."""
        seed(memory_store, *(make_event(f"evt-{i}", maximum=2) for i in range(4)))

        first = catalog.list_events(EventFilter(status=EventStatus.AVAILABLE), limit=2)
        memory_store.conditional_update("EVENT#evt-3", "METADATA", field="capacity.registered", expected=0, value=2)
        second = catalog.list_events(
            EventFilter(status=EventStatus.AVAILABLE), limit=2, continuation_token=first.next_token
        )

        assert [str(e.id) for e in first.events] == ["evt-0", "evt-1"]
        assert [str(e.id) for e in second.events] == ["evt-2"]
