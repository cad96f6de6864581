"""Availability Calculator.

Remaining capacity is always recomputed from the ticket, offer and seat
ledgers; no counter is cached.
"""

from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

from reservations.domain import Availability, Event, EventId
from reservations.domain.errors import EventNotFoundError
from reservations.stores.interfaces import (
    EventStore,
    SeatStore,
    TicketStore,
    WaitingListStore,
)


class AvailabilityCalculator:
    """Projects an event's capacity from its ledgers."""

    def __init__(
        self,
        events: EventStore,
        tickets: TicketStore,
        waiting_list: WaitingListStore,
        seats: SeatStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._events = events
        self._tickets = tickets
        self._waiting_list = waiting_list
        self._seats = seats
        self._clock = clock

    def compute(self, event_id: str | EventId) -> Availability:
        """Return availability for an event.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        parsed = EventId.coerce(event_id)
        event = self._events.get_event(parsed)
        if event is None:
            raise EventNotFoundError(str(parsed))
        return self.for_event(event)

    def for_event(self, event: Event) -> Availability:
        if event.is_seated:
            return self._seated(event)
        return self._flat(event)

    def _flat(self, event: Event) -> Availability:
        return Availability(
            total_capacity=event.total_tickets.value,
            committed_count=self._tickets.count_committed(event.id),
            pending_count=self._waiting_list.count_live_offers(event.id, self._clock()),
            min_price=event.price,
        )

    def _seated(self, event: Event) -> Availability:
        summary = self._seats.summarize(event.id, self._clock())
        return Availability(
            total_capacity=summary.total,
            committed_count=summary.sold,
            pending_count=summary.held,
            min_price=summary.min_price or event.price,
        )
