"""Store interfaces (repository pattern).

Stores must be swappable. Unlike a domain repository, an ItemStore is a
thin key-value contract: items are plain dicts carrying their composite key
under "PK" and "SK", and the only concurrency primitive is the
single-attribute compare-and-swap in `conditional_update`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

Item = dict[str, Any]
Key = dict[str, str]

PARTITION_KEY = "PK"
SORT_KEY = "SK"


@dataclass(frozen=True)
class ItemPage:
    """A batch of items plus the composite key to resume after, if any."""

    items: list[Item] = field(default_factory=list)
    last_key: Key | None = None


def item_key(item: Item) -> Key:
    return {PARTITION_KEY: item[PARTITION_KEY], SORT_KEY: item[SORT_KEY]}


class ItemStore(ABC):
    """Interface for item persistence operations."""

    @abstractmethod
    def get_item(self, partition_key: str, sort_key: str) -> Item | None:
        """Return the item stored under the composite key, or None."""
        ...

    @abstractmethod
    def put_item(self, item: Item, *, fail_if_exists: bool = False) -> None:
        """Write an item.

        Raises:
            ItemAlreadyExistsError: If fail_if_exists is set and the key is taken.
        """
        ...

    @abstractmethod
    def conditional_update(
        self,
        partition_key: str,
        sort_key: str,
        *,
        field: str,
        expected: Any,
        value: Any,
    ) -> Item:
        """Set the dotted attribute `field` to `value` if it currently equals `expected`.

        Returns the full item after the write.

        Raises:
            PreconditionFailedError: If the stored value differs or the item is absent.
        """
        ...

    @abstractmethod
    def range_query(
        self,
        partition_key: str,
        sort_key_prefix: str,
        *,
        start_key: Key | None = None,
        limit: int | None = None,
    ) -> ItemPage:
        """Return items of one partition whose sort key starts with the prefix, ascending."""
        ...

    @abstractmethod
    def scan(
        self,
        *,
        sort_key: str,
        start_key: Key | None = None,
        limit: int | None = None,
    ) -> ItemPage:
        """Return items across all partitions that carry exactly `sort_key`.

        `limit` is a page-size hint; a page may come back short while
        `last_key` is still set.
        """
        ...


MISSING = object()


def read_attribute(item: Item, path: str) -> Any:
    """Resolve a dotted attribute path, returning a sentinel when absent."""
    value: Any = item
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return MISSING
        value = value[part]
    return value


def write_attribute(item: Item, path: str, value: Any) -> None:
    """Set a dotted attribute path in place, creating maps along the way."""
    *parents, leaf = path.split(".")
    target = item
    for part in parents:
        target = target.setdefault(part, {})
    target[leaf] = value
