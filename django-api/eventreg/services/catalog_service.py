"""Event catalog service - read-side queries over event records.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Listing does one store scan per call. Filters run in memory after the
scan, so a page can come back short (even empty) with a next token. Pages
are not a snapshot: events that change between calls may move in or out of
later pages.
"""

import structlog

from eventreg.domain import Event, EventFilter, EventId, EventPage
from eventreg.domain.errors import EventNotFoundError, InvalidRequestError
from eventreg.services.pagination import decode_token, encode_token
from eventreg.stores.interfaces import ItemStore, item_key
from eventreg.stores.records import METADATA, event_from_item, event_partition_key

logger = structlog.get_logger(__name__)

DEFAULT_LIMIT = 25
MAX_LIMIT = 100


def parse_event_id(event_id: str) -> EventId:
    try:
        return EventId(event_id)
    except ValueError as e:
        raise InvalidRequestError(str(e)) from e


class EventCatalog:
    """Service for event catalog operations."""

    def __init__(self, store: ItemStore, *, overfetch_factor: int = 2) -> None:
        self._store = store
        self._overfetch_factor = max(1, overfetch_factor)

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidRequestError: If the event_id is malformed.
            EventNotFoundError: If the event does not exist.
        """
        parsed = parse_event_id(event_id)
        item = self._store.get_item(event_partition_key(parsed), METADATA)
        if item is None:
            raise EventNotFoundError(event_id)
        return event_from_item(item)

    def list_events(
        self,
        event_filter: EventFilter | None = None,
        limit: int = DEFAULT_LIMIT,
        continuation_token: str | None = None,
    ) -> EventPage:
        """Return one filtered page of events.

        Raises:
            InvalidRequestError: If limit is out of range or the token is invalid.
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_LIMIT:
            raise InvalidRequestError(f"Limit must be between 1 and {MAX_LIMIT}")
        event_filter = event_filter or EventFilter()
        start_key = decode_token(continuation_token) if continuation_token else None

        page = self._store.scan(
            sort_key=METADATA,
            start_key=start_key,
            limit=limit * self._overfetch_factor,
        )
        candidates = []
        for item in page.items:
            event = event_from_item(item)
            if event_filter.matches(event):
                candidates.append((item_key(item), event))

        if len(candidates) > limit:
            # Resume right after the last event handed out so the rest of the buffer is not skipped
            resume_key = candidates[limit - 1][0]
            candidates = candidates[:limit]
        else:
            resume_key = page.last_key

        logger.debug(
            "catalog.page",
            scanned=len(page.items),
            returned=len(candidates),
            has_more=resume_key is not None,
        )
        return EventPage(
            events=tuple(event for _, event in candidates),
            next_token=encode_token(resume_key) if resume_key is not None else None,
        )
