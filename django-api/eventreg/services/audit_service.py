"""Capacity audit - detect events whose counter and registrations disagree.

The registration engine cannot write the capacity counter and the
registration record atomically, so `capacity.registered` may exceed the
seats actually recorded. This audit only reports; it never writes.
"""

from collections.abc import Iterator
from dataclasses import dataclass

import structlog

from eventreg.stores.interfaces import ItemStore, Key
from eventreg.stores.records import METADATA, REGISTRATION_PREFIX, event_from_item, registration_from_item

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CapacityMismatch:
    event_id: str
    registered: int
    recorded_seats: int
    registrations: int

    @property
    def orphaned_seats(self) -> int:
        return self.registered - self.recorded_seats


class CapacityAuditor:
    """Compares every event's counter with the sum of its registrations' group sizes."""

    def __init__(self, store: ItemStore, *, page_size: int = 100) -> None:
        self._store = store
        self._page_size = page_size

    def find_mismatches(self) -> list[CapacityMismatch]:
        mismatches = []
        checked = 0
        for item in self._scan_events():
            event = event_from_item(item)
            checked += 1
            seats, count = self._recorded_seats(item["PK"])
            if seats != event.capacity.registered:
                mismatch = CapacityMismatch(
                    event_id=str(event.id),
                    registered=event.capacity.registered,
                    recorded_seats=seats,
                    registrations=count,
                )
                logger.warning(
                    "audit.capacity_mismatch",
                    event_id=mismatch.event_id,
                    registered=mismatch.registered,
                    recorded_seats=mismatch.recorded_seats,
                )
                mismatches.append(mismatch)
        logger.info("audit.completed", events=checked, mismatches=len(mismatches))
        return mismatches

    def _scan_events(self) -> Iterator[dict]:
        start_key: Key | None = None
        while True:
            page = self._store.scan(sort_key=METADATA, start_key=start_key, limit=self._page_size)
            yield from page.items
            if page.last_key is None:
                return
            start_key = page.last_key

    def _recorded_seats(self, partition_key: str) -> tuple[int, int]:
        seats = count = 0
        start_key: Key | None = None
        while True:
            page = self._store.range_query(
                partition_key, REGISTRATION_PREFIX, start_key=start_key, limit=self._page_size
            )
            for item in page.items:
                seats += registration_from_item(item).group_size
                count += 1
            if page.last_key is None:
                return seats, count
            start_key = page.last_key
