"""Cache keys for event detail responses."""

from django.core.cache import cache

EVENT_DETAIL_KEY = "events:{event_id}"


def event_cache_key(event_id: str) -> str:
    return EVENT_DETAIL_KEY.format(event_id=event_id)


def invalidate_event(event_id: str) -> None:
    cache.delete(event_cache_key(event_id))
