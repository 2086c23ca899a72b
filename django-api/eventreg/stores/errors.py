"""Store-level failures. Services translate these into domain errors."""


class StoreError(Exception):
    """Base class for item store failures."""


class ItemAlreadyExistsError(StoreError):
    """An insert-if-absent found an item with the same composite key."""


class PreconditionFailedError(StoreError):
    """A conditional update found a different value than expected."""


class StoreUnavailableError(StoreError):
    """The store could not be reached or rejected the request."""


class StoreTimeoutError(StoreUnavailableError):
    """The request timed out; a write may or may not have been applied."""
