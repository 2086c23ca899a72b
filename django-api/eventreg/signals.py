"""Registration lifecycle signals and their cache invalidation handlers.

registration_committed: sent after both the capacity write and the
    registration record succeeded. Kwargs: registration, event.
capacity_orphaned: sent when the capacity write succeeded but the
    registration record could not be written, or timed out (outcome_unknown
    set). Kwargs: event_id, registration_id, group_size, outcome_unknown.
"""

from django.dispatch import Signal, receiver

from eventreg.cache import invalidate_event

registration_committed = Signal()
capacity_orphaned = Signal()


@receiver(registration_committed)
def invalidate_event_cache(sender, registration, event, **kwargs):
    """Invalidate the cached detail when an event's capacity moves."""
    invalidate_event(str(registration.event_id))


@receiver(capacity_orphaned)
def invalidate_orphaned_event_cache(sender, event_id, **kwargs):
    """The capacity moved even though no registration was recorded."""
    invalidate_event(str(event_id))
