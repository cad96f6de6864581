"""Waiting-List Queue: per-event FIFO of users who want a ticket."""

import logging
from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

from reservations.domain import EntryStatus, EventId, QueuePosition, WaitingListEntry
from reservations.domain.errors import (
    DuplicateEntryError,
    EventCancelledError,
    EventNotFoundError,
    SeatedEventError,
)
from reservations.services.availability import AvailabilityCalculator
from reservations.services.offers import OfferLifecycleManager
from reservations.stores.interfaces import EventStore, UnitOfWork, WaitingListStore

logger = logging.getLogger(__name__)


class WaitingListQueue:
    """Admits users to an event's queue and reports their rank."""

    def __init__(
        self,
        uow: UnitOfWork,
        events: EventStore,
        waiting_list: WaitingListStore,
        availability: AvailabilityCalculator,
        offers: OfferLifecycleManager,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._uow = uow
        self._events = events
        self._waiting_list = waiting_list
        self._availability = availability
        self._offers = offers
        self._clock = clock

    def join(self, event_id: str | EventId, user_id: str) -> WaitingListEntry:
        """Add a user to the queue, offering a ticket at once if one is free.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            EventCancelledError: If the event was cancelled.
            SeatedEventError: If the event sells individual seats.
            DuplicateEntryError: If the user already has an active entry.
        """
        parsed = EventId.coerce(event_id)
        with self._uow.atomic():
            event = self._events.lock_event(parsed)
            if event is None:
                raise EventNotFoundError(str(parsed))
            if event.is_cancelled:
                raise EventCancelledError(str(parsed))
            if event.is_seated:
                raise SeatedEventError(str(parsed))
            if self._waiting_list.get_active_entry(parsed, user_id) is not None:
                raise DuplicateEntryError(str(parsed), user_id)

            # Earlier entrants get any free slot before the newcomer does.
            self._offers.promote_locked(event)
            if self._availability.for_event(event).remaining > 0:
                entry = self._offers.open_offer(event, user_id)
            else:
                entry = self._waiting_list.add_entry(
                    parsed, user_id, EntryStatus.WAITING, created_at=self._clock()
                )

        logger.info(
            "waiting_list.joined",
            extra={
                "event_id": str(parsed),
                "entry_id": str(entry.id),
                "status": entry.status.value,
            },
        )
        return entry

    def position(self, event_id: str | EventId, user_id: str) -> QueuePosition | None:
        """Return the user's 1-based rank, or None without an active entry.

        Entrants ahead who currently hold an offer still count.
        """
        parsed = EventId.coerce(event_id)
        entry = self._waiting_list.get_active_entry(parsed, user_id)
        if entry is None:
            return None
        ahead = self._waiting_list.count_ahead(parsed, entry.created_at)
        return QueuePosition(entry=entry, position=ahead + 1)

    def entries_for_user(self, user_id: str) -> list[WaitingListEntry]:
        return self._waiting_list.list_for_user(user_id)
