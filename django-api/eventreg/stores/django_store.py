"""Django ORM implementation of the ItemStore.

Items live in the StoredItem table: the composite key in two columns and
every other attribute in a JSON column. Conditional updates are a single
UPDATE filtered on the guarded JSON attribute, issued under a row lock on
backends that support SELECT ... FOR UPDATE.
"""

from typing import Any

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from eventreg.models import StoredItem
from eventreg.stores.errors import (
    ItemAlreadyExistsError,
    PreconditionFailedError,
    StoreUnavailableError,
)
from eventreg.stores.interfaces import (
    MISSING,
    PARTITION_KEY,
    SORT_KEY,
    Item,
    ItemPage,
    ItemStore,
    Key,
    read_attribute,
    write_attribute,
)


def _to_item(row: StoredItem) -> Item:
    return {**row.attributes, PARTITION_KEY: row.partition_key, SORT_KEY: row.sort_key}


def _split(item: Item) -> tuple[str, str, dict[str, Any]]:
    attributes = {k: v for k, v in item.items() if k not in (PARTITION_KEY, SORT_KEY)}
    return item[PARTITION_KEY], item[SORT_KEY], attributes


class DjangoItemStore(ItemStore):
    """Relational-database-backed item store using Django ORM."""

    def get_item(self, partition_key: str, sort_key: str) -> Item | None:
        try:
            row = StoredItem.objects.filter(partition_key=partition_key, sort_key=sort_key).first()
        except DatabaseError as e:
            raise StoreUnavailableError(str(e)) from e
        return _to_item(row) if row is not None else None

    def put_item(self, item: Item, *, fail_if_exists: bool = False) -> None:
        partition_key, sort_key, attributes = _split(item)
        try:
            if fail_if_exists:
                with transaction.atomic():
                    StoredItem.objects.create(
                        partition_key=partition_key,
                        sort_key=sort_key,
                        attributes=attributes,
                    )
            else:
                StoredItem.objects.update_or_create(
                    partition_key=partition_key,
                    sort_key=sort_key,
                    defaults={"attributes": attributes},
                )
        except IntegrityError as e:
            raise ItemAlreadyExistsError(f"{partition_key}/{sort_key} already exists") from e
        except DatabaseError as e:
            raise StoreUnavailableError(str(e)) from e

    def conditional_update(
        self,
        partition_key: str,
        sort_key: str,
        *,
        field: str,
        expected: Any,
        value: Any,
    ) -> Item:
        lookup = "attributes__" + field.replace(".", "__")
        try:
            with transaction.atomic():
                row = (
                    StoredItem.objects.select_for_update()
                    .filter(partition_key=partition_key, sort_key=sort_key)
                    .first()
                )
                if row is None:
                    raise PreconditionFailedError(f"{partition_key}/{sort_key} does not exist")
                current = read_attribute(row.attributes, field)
                if current is MISSING or current != expected:
                    raise PreconditionFailedError(f"{field} changed on {partition_key}")

                attributes = row.attributes
                write_attribute(attributes, field, value)
                # The guard is re-evaluated by the UPDATE itself
                updated = StoredItem.objects.filter(
                    pk=row.pk,
                    **{lookup: expected},
                ).update(attributes=attributes, updated_at=timezone.now())
                if updated != 1:
                    raise PreconditionFailedError(f"{field} changed on {partition_key}")
        except DatabaseError as e:
            raise StoreUnavailableError(str(e)) from e
        return {**attributes, PARTITION_KEY: partition_key, SORT_KEY: sort_key}

    def range_query(
        self,
        partition_key: str,
        sort_key_prefix: str,
        *,
        start_key: Key | None = None,
        limit: int | None = None,
    ) -> ItemPage:
        queryset = StoredItem.objects.filter(
            partition_key=partition_key,
            sort_key__startswith=sort_key_prefix,
        )
        if start_key is not None:
            queryset = queryset.filter(sort_key__gt=start_key[SORT_KEY])
        return self._page(queryset.order_by("sort_key"), limit)

    def scan(
        self,
        *,
        sort_key: str,
        start_key: Key | None = None,
        limit: int | None = None,
    ) -> ItemPage:
        queryset = StoredItem.objects.filter(sort_key=sort_key)
        if start_key is not None:
            queryset = queryset.filter(
                Q(partition_key__gt=start_key[PARTITION_KEY])
                | Q(partition_key=start_key[PARTITION_KEY], sort_key__gt=start_key[SORT_KEY])
            )
        return self._page(queryset.order_by("partition_key", "sort_key"), limit)

    def _page(self, queryset, limit: int | None) -> ItemPage:
        try:
            if limit is None or limit < 1:
                return ItemPage(items=[_to_item(row) for row in queryset])
            # One extra row tells us whether anything is left
            rows = list(queryset[: limit + 1])
        except DatabaseError as e:
            raise StoreUnavailableError(str(e)) from e
        items = [_to_item(row) for row in rows[:limit]]
        if len(rows) > limit:
            last = items[-1]
            return ItemPage(items=items, last_key={PARTITION_KEY: last[PARTITION_KEY], SORT_KEY: last[SORT_KEY]})
        return ItemPage(items=items)
