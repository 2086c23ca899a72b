from functools import cache

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from eventreg.stores.interfaces import ItemPage, ItemStore

__all__ = ["ItemPage", "ItemStore", "get_item_store"]


@cache
def get_item_store() -> ItemStore:
    """Return the process-wide store selected by EVENTREG_STORE_BACKEND."""
    backend = settings.EVENTREG_STORE_BACKEND
    if backend == "django":
        from eventreg.stores.django_store import DjangoItemStore

        return DjangoItemStore()
    if backend == "memory":
        from eventreg.stores.memory_store import InMemoryItemStore

        return InMemoryItemStore()
    if backend == "dynamodb":
        from eventreg.stores.dynamo_store import DynamoItemStore

        return DynamoItemStore(
            settings.EVENTREG_TABLE_NAME,
            region=settings.EVENTREG_AWS_REGION,
            endpoint_url=settings.EVENTREG_DYNAMODB_ENDPOINT_URL,
            timeout=settings.EVENTREG_STORE_TIMEOUT_SECONDS,
        )
    raise ImproperlyConfigured(f"Unknown EVENTREG_STORE_BACKEND: {backend!r}")
