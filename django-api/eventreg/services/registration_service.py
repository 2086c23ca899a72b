"""Registration engine - capacity-safe registration over a key-value store.

A registration attempt moves through:

    VALIDATING -> DUPLICATE_CHECKING -> CAPACITY_RESERVING
        -> REGISTRATION_RECORDING -> COMMITTED

and can be rejected from any non-terminal state. The only coordination
between concurrent attempts is the compare-and-swap on the event's
`capacity.registered` attribute:

- Overselling is impossible: a reservation writes R0 + group_size guarded by
  registered == R0, so two writers cannot both move the counter from R0.
- Every attempt re-reads the event to take R0. A lost compare-and-swap is
  reported as insufficient capacity. By default there is exactly one attempt
  per request; `cas_attempts` > 1 retries up to that many times.
- The duplicate-email check is a read, not a lock. Two concurrent requests
  with the same email can both pass it and both be recorded.
- The capacity write and the registration record are separate items. If the
  record write fails after the capacity write succeeded the seats stay
  spent; this is logged as `registration.capacity_orphaned` and surfaced as
  an internal error. Nothing here repairs it (see services/audit_service.py).
- A timed-out capacity write or registration record write may have been
  applied. Either is surfaced as an internal error with `outcome_unknown` set.
"""

import secrets
import time
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any

import structlog
from django.utils import timezone

from eventreg.domain import (
    AttendeeName,
    EmailAddress,
    Event,
    EventId,
    GroupSize,
    Registration,
    RegistrationResult,
)
from eventreg.domain.errors import (
    DomainError,
    DuplicateRegistrationError,
    EventFullError,
    InsufficientCapacityError,
    InternalError,
    InvalidEmailError,
    InvalidRequestError,
)
from eventreg.services.catalog_service import EventCatalog, parse_event_id
from eventreg.signals import capacity_orphaned, registration_committed
from eventreg.stores.errors import PreconditionFailedError, StoreError, StoreTimeoutError
from eventreg.stores.interfaces import ItemStore
from eventreg.stores.records import (
    METADATA,
    REGISTERED_FIELD,
    REGISTRATION_PREFIX,
    event_from_item,
    event_partition_key,
    registration_to_item,
)

logger = structlog.get_logger(__name__)


class RegistrationState(Enum):
    VALIDATING = "validating"
    DUPLICATE_CHECKING = "duplicate_checking"
    CAPACITY_RESERVING = "capacity_reserving"
    REGISTRATION_RECORDING = "registration_recording"
    COMMITTED = "committed"


def new_registration_id() -> str:
    """Millisecond timestamp plus a random suffix."""
    return f"reg_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


class RegistrationService:
    """Service that accepts or rejects registrations against event capacity."""

    def __init__(
        self,
        store: ItemStore,
        catalog: EventCatalog | None = None,
        *,
        case_sensitive_emails: bool = True,
        cas_attempts: int = 1,
        clock: Callable[[], datetime] = timezone.now,
        id_factory: Callable[[], str] = new_registration_id,
    ) -> None:
        self._store = store
        self._catalog = catalog or EventCatalog(store)
        self._case_sensitive_emails = case_sensitive_emails
        self._cas_attempts = max(1, cas_attempts)
        self._clock = clock
        self._id_factory = id_factory

    def register(
        self,
        event_id: str,
        attendee_email: Any,
        attendee_name: Any,
        group_size: Any = 1,
    ) -> RegistrationResult:
        """Register an attendee (and their group) for an event.

        Raises:
            InvalidEmailError: If the email does not look like an address.
            InvalidRequestError: If the name, group size or event ID is malformed.
            EventNotFoundError: If the event does not exist.
            DuplicateRegistrationError: If the email is already registered.
            EventFullError: If the event had no seats left.
            InsufficientCapacityError: If the group does not fit or the
                capacity write lost a race.
            InternalError: If the registration record could not be written,
                or with `outcome_unknown` set if either write timed out.
        """
        log = logger.bind(event_id=event_id)
        state = RegistrationState.VALIDATING
        try:
            parsed_id, email, name, size = self._validate(event_id, attendee_email, attendee_name, group_size)
            event = self._catalog.get_event(event_id)

            state = self._enter(log, RegistrationState.DUPLICATE_CHECKING)
            if self._is_duplicate(parsed_id, email):
                raise DuplicateRegistrationError(event_id)
            if event.capacity.is_full:
                raise EventFullError(event_id)
            if not event.capacity.can_admit(size.value):
                raise InsufficientCapacityError(event_id, size.value)

            state = self._enter(log, RegistrationState.CAPACITY_RESERVING)
            updated = self._reserve(log, event, size.value)

            state = self._enter(log, RegistrationState.REGISTRATION_RECORDING)
            registration = Registration(
                registration_id=self._id_factory(),
                event_id=parsed_id,
                attendee_email=email.value,
                attendee_name=name.value,
                group_size=size.value,
                registered_at=self._clock(),
            )
            self._record(log, registration)
        except DomainError as e:
            log.info("registration.rejected", state=state.value, code=e.code.value)
            raise

        self._enter(log, RegistrationState.COMMITTED)
        log.info(
            "registration.committed",
            registration_id=registration.registration_id,
            group_size=registration.group_size,
            registered=updated.capacity.registered,
            capacity=updated.capacity.maximum,
        )
        registration_committed.send(sender=self.__class__, registration=registration, event=updated)
        return RegistrationResult(registration=registration, event=updated)

    def _enter(self, log: Any, state: RegistrationState) -> RegistrationState:
        log.debug("registration.state", state=state.value)
        return state

    def _validate(
        self, event_id: str, attendee_email: Any, attendee_name: Any, group_size: Any
    ) -> tuple[EventId, EmailAddress, AttendeeName, GroupSize]:
        try:
            email = EmailAddress(attendee_email)
        except ValueError as e:
            raise InvalidEmailError() from e
        try:
            name = AttendeeName(attendee_name)
        except ValueError as e:
            raise InvalidRequestError("Attendee name must be a non-empty string") from e
        try:
            size = GroupSize(group_size)
        except ValueError as e:
            raise InvalidRequestError("Group size must be a positive integer") from e
        return parse_event_id(event_id), email, name, size

    def _is_duplicate(self, event_id: EventId, email: EmailAddress) -> bool:
        partition_key = event_partition_key(event_id)
        start_key = None
        while True:
            page = self._store.range_query(partition_key, REGISTRATION_PREFIX, start_key=start_key)
            for item in page.items:
                if email.matches(item.get("attendeeEmail", ""), case_sensitive=self._case_sensitive_emails):
                    return True
            if page.last_key is None:
                return False
            start_key = page.last_key

    def _reserve(self, log: Any, event: Event, group_size: int) -> Event:
        """Move capacity.registered from R0 to R0 + group_size, guarded on R0.

        R0 is re-read on every attempt, so seats taken while the duplicate
        check ran do not cost this request its attempt.
        """
        partition_key = event_partition_key(event.id)
        for attempt in range(1, self._cas_attempts + 1):
            event = self._catalog.get_event(str(event.id))
            registered = event.capacity.registered
            if not event.capacity.can_admit(group_size):
                raise InsufficientCapacityError(str(event.id), group_size)
            try:
                item = self._store.conditional_update(
                    partition_key,
                    METADATA,
                    field=REGISTERED_FIELD,
                    expected=registered,
                    value=registered + group_size,
                )
            except PreconditionFailedError:
                log.info("registration.capacity_contention", attempt=attempt, expected=registered)
                continue
            except StoreTimeoutError as e:
                log.error("registration.capacity_outcome_unknown", expected=registered, group_size=group_size)
                raise InternalError("Registration outcome unknown", outcome_unknown=True) from e
            return event_from_item(item)
        raise InsufficientCapacityError(str(event.id), group_size)

    def _record(self, log: Any, registration: Registration) -> None:
        try:
            self._store.put_item(registration_to_item(registration), fail_if_exists=True)
        except StoreTimeoutError as e:
            log.error(
                "registration.record_outcome_unknown",
                registration_id=registration.registration_id,
                group_size=registration.group_size,
            )
            self._send_orphaned(registration, outcome_unknown=True)
            raise InternalError("Registration outcome unknown", outcome_unknown=True) from e
        except StoreError as e:
            log.error(
                "registration.capacity_orphaned",
                registration_id=registration.registration_id,
                group_size=registration.group_size,
                error=str(e),
            )
            self._send_orphaned(registration, outcome_unknown=False)
            raise InternalError("Failed to register for event") from e

    def _send_orphaned(self, registration: Registration, *, outcome_unknown: bool) -> None:
        capacity_orphaned.send(
            sender=self.__class__,
            event_id=registration.event_id,
            registration_id=registration.registration_id,
            group_size=registration.group_size,
            outcome_unknown=outcome_unknown,
        )
