"""Offer Lifecycle Manager.

Per entry: waiting -> offered -> purchased, or offered -> expired on timeout
or explicit release. Every transition re-reads the entry under the event
lock, so timer callbacks may be delivered twice or late.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from django.utils import timezone

from reservations.conf import ReservationPolicy
from reservations.domain import (
    EntryId,
    EntryStatus,
    Event,
    EventId,
    JobKind,
    PaymentFact,
    Ticket,
    TicketId,
    TicketStatus,
    WaitingListEntry,
)
from reservations.domain.errors import (
    EntryNotFoundError,
    EventCancelledError,
    EventNotFoundError,
    InvalidOfferStateError,
    OfferExpiredError,
)
from reservations.services.availability import AvailabilityCalculator
from reservations.stores.interfaces import (
    EventStore,
    JobScheduler,
    TicketStore,
    UnitOfWork,
    WaitingListStore,
)

logger = logging.getLogger(__name__)


class OfferLifecycleManager:
    """Turns queue entrants into time-boxed purchase offers and back."""

    def __init__(
        self,
        uow: UnitOfWork,
        events: EventStore,
        waiting_list: WaitingListStore,
        tickets: TicketStore,
        scheduler: JobScheduler,
        availability: AvailabilityCalculator,
        policy: ReservationPolicy,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._uow = uow
        self._events = events
        self._waiting_list = waiting_list
        self._tickets = tickets
        self._scheduler = scheduler
        self._availability = availability
        self._policy = policy
        self._clock = clock

    def promote(self, event_id: str | EventId) -> list[WaitingListEntry]:
        """Offer freed capacity to the oldest waiting entrants.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        parsed = EventId.coerce(event_id)
        with self._uow.atomic():
            event = self._events.lock_event(parsed)
            if event is None:
                raise EventNotFoundError(str(parsed))
            return self.promote_locked(event)

    def promote_locked(self, event: Event) -> list[WaitingListEntry]:
        """Promote entrants of an event whose row lock the caller holds."""
        if event.is_cancelled or event.is_seated:
            return []
        remaining = self._availability.for_event(event).remaining
        if remaining <= 0:
            return []

        offered = []
        for entry in self._waiting_list.oldest_waiting(event.id, remaining):
            expires_at = self._clock() + self._policy.offer_window
            if not self._waiting_list.transition(
                entry.id, EntryStatus.WAITING, EntryStatus.OFFERED, expires_at
            ):
                continue
            promoted = replace(entry, status=EntryStatus.OFFERED, offer_expires_at=expires_at)
            self._schedule_expiry(promoted)
            offered.append(promoted)
        if offered:
            logger.info(
                "offers.promoted",
                extra={"event_id": str(event.id), "count": len(offered)},
            )
        return offered

    def open_offer(self, event: Event, user_id: str) -> WaitingListEntry:
        """Create an entry directly in offered state, skipping the queue."""
        now = self._clock()
        entry = self._waiting_list.add_entry(
            event.id,
            user_id,
            EntryStatus.OFFERED,
            created_at=now,
            offer_expires_at=now + self._policy.offer_window,
        )
        self._schedule_expiry(entry)
        logger.info(
            "offers.opened",
            extra={"event_id": str(event.id), "entry_id": str(entry.id)},
        )
        return entry

    def expire(self, entry_id: str | EntryId, event_id: str | EventId) -> bool:
        """Scheduler callback: expire an offer and cascade the slot.

        Returns False, without error, when the entry has already moved on.
        """
        entry_key = EntryId.coerce(entry_id)
        event_key = EventId.coerce(event_id)
        with self._uow.atomic():
            event = self._events.lock_event(event_key)
            entry = self._waiting_list.get_entry(entry_key, for_update=True)
            if entry is None or entry.event_id != event_key:
                logger.debug("offers.expire_skipped", extra={"entry_id": str(entry_key)})
                return False
            if entry.status is not EntryStatus.OFFERED:
                logger.debug(
                    "offers.expire_skipped",
                    extra={"entry_id": str(entry_key), "status": entry.status.value},
                )
                return False
            return self._close_offer(event, entry, reason="expired")

    def release(
        self,
        entry_id: str | EntryId,
        event_id: str | EventId,
        user_id: str | None = None,
    ) -> bool:
        """Give up an offer on request; same end state as a timeout.

        Raises:
            EventNotFoundError: If the event does not exist.
            EntryNotFoundError: If the entry does not exist for the event.
            InvalidOfferStateError: If ``user_id`` is given and does not own the entry.
        """
        entry_key = EntryId.coerce(entry_id)
        event_key = EventId.coerce(event_id)
        with self._uow.atomic():
            event = self._events.lock_event(event_key)
            if event is None:
                raise EventNotFoundError(str(event_key))
            entry = self._waiting_list.get_entry(entry_key, for_update=True)
            if entry is None or entry.event_id != event_key:
                raise EntryNotFoundError(str(entry_key))
            if user_id is not None and entry.user_id != user_id:
                raise InvalidOfferStateError(
                    str(entry_key), "Waiting list entry does not belong to this user"
                )
            if entry.status is not EntryStatus.OFFERED:
                return False
            return self._close_offer(event, entry, reason="released")

    def purchase(
        self,
        entry_id: str | EntryId,
        event_id: str | EventId,
        user_id: str,
        payment: PaymentFact,
    ) -> Ticket:
        """Convert a live offer into a valid ticket.

        Capacity is consumed rather than freed, so no promotion follows.

        Raises:
            EventNotFoundError: If the event does not exist.
            EntryNotFoundError: If the entry does not exist for the event.
            InvalidOfferStateError: If the entry is not offered or not the caller's.
            EventCancelledError: If the event was cancelled.
            OfferExpiredError: If the offer window has passed.
        """
        entry_key = EntryId.coerce(entry_id)
        event_key = EventId.coerce(event_id)
        with self._uow.atomic():
            event = self._events.lock_event(event_key)
            if event is None:
                raise EventNotFoundError(str(event_key))
            entry = self._waiting_list.get_entry(entry_key, for_update=True)
            if entry is None or entry.event_id != event_key:
                raise EntryNotFoundError(str(entry_key))
            if entry.status is not EntryStatus.OFFERED:
                raise InvalidOfferStateError(
                    str(entry_key),
                    "Invalid waiting list status - ticket offer may have expired",
                )
            if entry.user_id != user_id:
                raise InvalidOfferStateError(
                    str(entry_key), "Waiting list entry does not belong to this user"
                )
            if event.is_cancelled:
                raise EventCancelledError(str(event_key))
            now = self._clock()
            if entry.offer_expires_at is None or entry.offer_expires_at <= now:
                raise OfferExpiredError(str(entry_key))

            ticket = Ticket(
                id=TicketId.new(),
                event_id=event.id,
                user_id=user_id,
                status=TicketStatus.VALID,
                purchased_at=now,
                amount=payment.amount,
                payment_reference=payment.external_reference,
            )
            [issued] = self._tickets.add_tickets([ticket])
            if not self._waiting_list.transition(
                entry.id, EntryStatus.OFFERED, EntryStatus.PURCHASED
            ):
                raise InvalidOfferStateError(str(entry_key), "Ticket offer is no longer open")

        logger.info(
            "offers.purchased",
            extra={
                "event_id": str(event_key),
                "entry_id": str(entry_key),
                "ticket_id": str(issued.id),
            },
        )
        return issued

    def _close_offer(self, event: Event | None, entry: WaitingListEntry, reason: str) -> bool:
        closed = self._waiting_list.transition(
            entry.id, EntryStatus.OFFERED, EntryStatus.EXPIRED
        )
        if not closed:
            return False
        logger.info(
            f"offers.{reason}",
            extra={"event_id": str(entry.event_id), "entry_id": str(entry.id)},
        )
        if event is not None:
            self.promote_locked(event)
        return True

    def _schedule_expiry(self, entry: WaitingListEntry) -> None:
        self._scheduler.schedule(
            entry.offer_expires_at,
            JobKind.EXPIRE_OFFER,
            {"entry_id": str(entry.id), "event_id": str(entry.event_id)},
        )
