"""Process-local ItemStore.

Every public operation holds one lock for its whole duration, which makes
each single-item operation atomic the same way a real key-value store is.
Nothing spans more than one call.
"""

import copy
import threading
from typing import Any

from eventreg.stores.errors import ItemAlreadyExistsError, PreconditionFailedError
from eventreg.stores.interfaces import (
    MISSING,
    PARTITION_KEY,
    SORT_KEY,
    Item,
    ItemPage,
    ItemStore,
    Key,
    item_key,
    read_attribute,
    write_attribute,
)


class InMemoryItemStore(ItemStore):
    """Dict-backed store, ordered by (PK, SK) for scans and queries."""

    def __init__(self) -> None:
        self._items: dict[tuple[str, str], Item] = {}
        self._lock = threading.Lock()

    def get_item(self, partition_key: str, sort_key: str) -> Item | None:
        with self._lock:
            item = self._items.get((partition_key, sort_key))
            return copy.deepcopy(item) if item is not None else None

    def put_item(self, item: Item, *, fail_if_exists: bool = False) -> None:
        key = (item[PARTITION_KEY], item[SORT_KEY])
        with self._lock:
            if fail_if_exists and key in self._items:
                raise ItemAlreadyExistsError(f"{key[0]}/{key[1]} already exists")
            self._items[key] = copy.deepcopy(item)

    def conditional_update(
        self,
        partition_key: str,
        sort_key: str,
        *,
        field: str,
        expected: Any,
        value: Any,
    ) -> Item:
        with self._lock:
            item = self._items.get((partition_key, sort_key))
            if item is None:
                raise PreconditionFailedError(f"{partition_key}/{sort_key} does not exist")
            current = read_attribute(item, field)
            if current is MISSING or current != expected:
                raise PreconditionFailedError(f"{field} changed on {partition_key}")
            write_attribute(item, field, copy.deepcopy(value))
            return copy.deepcopy(item)

    def range_query(
        self,
        partition_key: str,
        sort_key_prefix: str,
        *,
        start_key: Key | None = None,
        limit: int | None = None,
    ) -> ItemPage:
        with self._lock:
            keys = [
                key
                for key in sorted(self._items)
                if key[0] == partition_key and key[1].startswith(sort_key_prefix)
            ]
            return self._page(keys, start_key, limit)

    def scan(
        self,
        *,
        sort_key: str,
        start_key: Key | None = None,
        limit: int | None = None,
    ) -> ItemPage:
        with self._lock:
            keys = [key for key in sorted(self._items) if key[1] == sort_key]
            return self._page(keys, start_key, limit)

    def _page(self, keys: list[tuple[str, str]], start_key: Key | None, limit: int | None) -> ItemPage:
        if start_key is not None:
            resume_after = (start_key[PARTITION_KEY], start_key[SORT_KEY])
            keys = [key for key in keys if key > resume_after]
        if limit is not None and 0 < limit < len(keys):
            selected = keys[:limit]
            items = [copy.deepcopy(self._items[key]) for key in selected]
            return ItemPage(items=items, last_key=item_key(items[-1]))
        return ItemPage(items=[copy.deepcopy(self._items[key]) for key in keys])
