"""Ticket Ledger lookups and monotonic status changes."""

import logging

from reservations.domain import EventId, Ticket, TicketId, TicketStatus
from reservations.domain.errors import InvalidTicketTransitionError, TicketNotFoundError
from reservations.services.offers import OfferLifecycleManager
from reservations.stores.interfaces import EventStore, TicketStore, UnitOfWork

logger = logging.getLogger(__name__)


class TicketLedger:
    """Service for ticket queries and status flags."""

    def __init__(
        self,
        uow: UnitOfWork,
        events: EventStore,
        tickets: TicketStore,
        offers: OfferLifecycleManager,
    ) -> None:
        self._uow = uow
        self._events = events
        self._tickets = tickets
        self._offers = offers

    def tickets_for_user(self, user_id: str) -> list[Ticket]:
        return self._tickets.list_for_user(user_id)

    def tickets_for_event(self, event_id: str | EventId) -> list[Ticket]:
        return self._tickets.list_for_event(EventId.coerce(event_id))

    def tickets_for_user_event(self, user_id: str, event_id: str | EventId) -> list[Ticket]:
        return self._tickets.list_for_user_event(user_id, EventId.coerce(event_id))

    def has_ticket(self, user_id: str, event_id: str | EventId) -> bool:
        """True if the user holds a valid or used ticket for the event."""
        return any(
            ticket.is_committed
            for ticket in self.tickets_for_user_event(user_id, event_id)
        )

    def mark_used(self, ticket_id: str | TicketId) -> Ticket:
        return self._change_status(ticket_id, TicketStatus.USED)

    def refund(self, ticket_id: str | TicketId) -> Ticket:
        return self._change_status(ticket_id, TicketStatus.REFUNDED)

    def cancel(self, ticket_id: str | TicketId) -> Ticket:
        return self._change_status(ticket_id, TicketStatus.CANCELLED)

    def _change_status(self, ticket_id: str | TicketId, status: TicketStatus) -> Ticket:
        """Apply a forward-only status change.

        Raises:
            TicketNotFoundError: If the ticket does not exist.
            InvalidTicketTransitionError: If the change would not be monotonic.
        """
        parsed = TicketId.coerce(ticket_id)
        with self._uow.atomic():
            ticket = self._tickets.get_ticket(parsed)
            if ticket is None:
                raise TicketNotFoundError(str(parsed))
            # Event lock first, as every other transition takes it.
            event = self._events.lock_event(ticket.event_id)
            ticket = self._tickets.get_ticket(parsed, for_update=True)
            if not ticket.can_transition_to(status):
                raise InvalidTicketTransitionError(
                    str(parsed), ticket.status.value, status.value
                )
            self._tickets.set_status(parsed, status)
            updated = self._tickets.get_ticket(parsed)

            # A flat ticket leaving the committed set frees capacity.
            if ticket.is_committed and not updated.is_committed and event is not None:
                self._offers.promote_locked(event)

        logger.info(
            "tickets.status_changed",
            extra={"ticket_id": str(parsed), "status": status.value},
        )
        return updated
