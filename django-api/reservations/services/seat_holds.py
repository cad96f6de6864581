"""Seat Hold Manager.

Per hold: created (seats held) -> confirmed (seats sold, tickets issued), or
created -> deleted (seats freed) on release or timeout. Seated events never
go through the waiting list.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from django.utils import timezone

from reservations.conf import ReservationPolicy
from reservations.domain import (
    EventId,
    HoldId,
    JobKind,
    Seat,
    SeatHold,
    SeatMap,
    SeatMapRow,
    SeatMapSection,
    SeatRef,
    SeatStatus,
    Ticket,
    TicketId,
    TicketStatus,
)
from reservations.domain.errors import (
    EventCancelledError,
    EventNotFoundError,
    EventNotSeatedError,
    HoldExpiredError,
    HoldIntegrityError,
    HoldNotFoundError,
    HoldOwnershipError,
    InvalidSeatSelectionError,
    SeatNotFoundError,
    SeatUnavailableError,
)
from reservations.stores.interfaces import (
    EventStore,
    JobScheduler,
    SeatHoldStore,
    SeatingPlanStore,
    SeatStore,
    TicketStore,
    UnitOfWork,
)

logger = logging.getLogger(__name__)


def _label_key(label: str) -> tuple[int, int, str]:
    if label.isdigit():
        return (0, int(label), label)
    return (1, 0, label)


class SeatHoldManager:
    """Self-service seat selection with short provisional holds."""

    def __init__(
        self,
        uow: UnitOfWork,
        events: EventStore,
        plans: SeatingPlanStore,
        seats: SeatStore,
        holds: SeatHoldStore,
        tickets: TicketStore,
        scheduler: JobScheduler,
        policy: ReservationPolicy,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._uow = uow
        self._events = events
        self._plans = plans
        self._seats = seats
        self._holds = holds
        self._tickets = tickets
        self._scheduler = scheduler
        self._policy = policy
        self._clock = clock

    def hold(
        self, event_id: str | EventId, user_id: str, seats: Iterable[SeatRef]
    ) -> SeatHold:
        """Hold every requested seat or none of them.

        Raises:
            InvalidSeatSelectionError: If no seat is given or one repeats.
            EventNotFoundError: If the event does not exist.
            EventNotSeatedError: If the event has no seating plan.
            EventCancelledError: If the event was cancelled.
            SeatNotFoundError: If a seat was never materialized.
            SeatUnavailableError: If any seat is held or sold.
        """
        refs = list(seats)
        if not refs:
            raise InvalidSeatSelectionError("Select at least one seat")
        if len(set(refs)) != len(refs):
            raise InvalidSeatSelectionError("A seat was selected more than once")

        parsed = EventId.coerce(event_id)
        with self._uow.atomic():
            event = self._events.lock_event(parsed)
            if event is None:
                raise EventNotFoundError(str(parsed))
            if not event.is_seated:
                raise EventNotSeatedError(str(parsed))
            if event.is_cancelled:
                raise EventCancelledError(str(parsed))

            found = self._seats.get_seats(parsed, refs, for_update=True)
            missing = [ref for ref in refs if ref not in found]
            if missing:
                raise SeatNotFoundError(str(missing[0]))
            taken = [str(ref) for ref in refs if found[ref].status is not SeatStatus.AVAILABLE]
            if taken:
                raise SeatUnavailableError(taken)

            now = self._clock()
            expires_at = now + self._policy.hold_window
            if self._seats.hold_seats(parsed, refs, expires_at) != len(refs):
                # Lost a race; raising rolls back the seats that did move.
                raise SeatUnavailableError([str(ref) for ref in refs])

            hold = self._holds.add_hold(
                SeatHold(
                    id=HoldId.new(),
                    event_id=parsed,
                    user_id=user_id,
                    seats=tuple(refs),
                    expires_at=expires_at,
                    created_at=now,
                )
            )
            self._scheduler.schedule(
                expires_at, JobKind.EXPIRE_HOLD, {"hold_id": str(hold.id)}
            )

        logger.info(
            "holds.created",
            extra={"event_id": str(parsed), "hold_id": str(hold.id), "seats": len(refs)},
        )
        return hold

    def release_hold(self, hold_id: str | HoldId, user_id: str | None = None) -> bool:
        """Free a hold's seats and delete it; confirmed holds are left alone.

        Raises:
            HoldNotFoundError: If the hold does not exist.
            HoldOwnershipError: If ``user_id`` is given and does not own the hold.
        """
        parsed = HoldId.coerce(hold_id)
        with self._uow.atomic():
            hold = self._holds.get_hold(parsed, for_update=True)
            if hold is None:
                raise HoldNotFoundError(str(parsed))
            if user_id is not None and hold.user_id != user_id:
                raise HoldOwnershipError(str(parsed))
            if hold.confirmed:
                return False
            self._free(hold, reason="released")
        return True

    def confirm_seats(
        self, hold_id: str | HoldId, user_id: str, payment_reference: str = ""
    ) -> list[Ticket]:
        """Sell every held seat of the hold and issue one ticket per seat.

        Confirming an already confirmed hold returns its tickets again.

        Raises:
            HoldNotFoundError: If the hold does not exist.
            HoldOwnershipError: If the hold belongs to another user.
            HoldExpiredError: If the hold window has passed.
            HoldIntegrityError: If a referenced seat is no longer held.
        """
        parsed = HoldId.coerce(hold_id)
        with self._uow.atomic():
            hold = self._holds.get_hold(parsed, for_update=True)
            if hold is None:
                raise HoldNotFoundError(str(parsed))
            if hold.user_id != user_id:
                raise HoldOwnershipError(str(parsed))
            now = self._clock()
            if hold.expires_at <= now:
                raise HoldExpiredError(str(parsed))
            if hold.confirmed:
                return self._tickets_for(hold)

            found = self._seats.get_seats(hold.event_id, hold.seats, for_update=True)
            for ref in hold.seats:
                seat = found.get(ref)
                if seat is None or seat.status is not SeatStatus.HELD:
                    logger.error(
                        "holds.integrity_violation",
                        extra={"hold_id": str(parsed), "seat": str(ref)},
                    )
                    raise HoldIntegrityError(str(parsed), str(ref))
            if self._seats.sell_seats(hold.event_id, hold.seats) != len(hold.seats):
                raise HoldIntegrityError(str(parsed), "selection")

            issued = self._tickets.add_tickets(
                [
                    Ticket(
                        id=TicketId.new(),
                        event_id=hold.event_id,
                        user_id=user_id,
                        status=TicketStatus.VALID,
                        purchased_at=now,
                        amount=found[ref].price,
                        payment_reference=payment_reference,
                        seat_ref=ref,
                    )
                    for ref in hold.seats
                ]
            )
            self._holds.mark_confirmed(parsed)

        logger.info(
            "holds.confirmed",
            extra={"hold_id": str(parsed), "tickets": len(issued)},
        )
        return issued

    def expire_hold(self, hold_id: str | HoldId) -> bool:
        """Scheduler callback: release the hold once its window has passed."""
        parsed = HoldId.coerce(hold_id)
        with self._uow.atomic():
            hold = self._holds.get_hold(parsed, for_update=True)
            if hold is None or hold.confirmed or hold.expires_at > self._clock():
                logger.debug("holds.expire_skipped", extra={"hold_id": str(parsed)})
                return False
            self._free(hold, reason="expired")
        return True

    def active_hold(self, event_id: str | EventId, user_id: str) -> SeatHold | None:
        parsed = EventId.coerce(event_id)
        return self._holds.active_hold(parsed, user_id, self._clock())

    def seat_map(self, event_id: str | EventId) -> SeatMap:
        """Return the event's seats grouped by section and row.

        Raises:
            EventNotFoundError: If the event does not exist.
        """
        parsed = EventId.coerce(event_id)
        event = self._events.get_event(parsed)
        if event is None:
            raise EventNotFoundError(str(parsed))
        if not event.is_seated:
            return SeatMap(sections=(), min_price=event.price)

        plan = self._plans.get_plan(event.seating_plan_id)
        names = {s.id: s.name for s in plan.sections} if plan else {}
        order = list(names)

        grouped: dict[str, dict[str, list[Seat]]] = {}
        for seat in self._seats.list_seats(parsed):
            grouped.setdefault(seat.ref.section_id, {}).setdefault(seat.ref.row, []).append(seat)
        if not grouped:
            return SeatMap(sections=(), min_price=event.price)

        section_ids = sorted(
            grouped, key=lambda s: (order.index(s) if s in order else len(order), s)
        )
        sections = tuple(
            SeatMapSection(
                id=section_id,
                name=names.get(section_id, section_id),
                rows=tuple(
                    SeatMapRow(
                        row=row,
                        seats=tuple(
                            sorted(seats, key=lambda s: _label_key(s.ref.seat_number))
                        ),
                    )
                    for row, seats in grouped[section_id].items()
                ),
            )
            for section_id in section_ids
        )
        min_price = min(
            (seat.price for rows in grouped.values() for seats in rows.values() for seat in seats),
            key=lambda money: money.amount,
        )
        return SeatMap(sections=sections, min_price=min_price)

    def _free(self, hold: SeatHold, reason: str) -> None:
        freed = self._seats.free_seats(hold.event_id, hold.seats)
        self._holds.delete_hold(hold.id)
        logger.info(
            f"holds.{reason}",
            extra={"hold_id": str(hold.id), "seats_freed": freed},
        )

    def _tickets_for(self, hold: SeatHold) -> list[Ticket]:
        refs = set(hold.seats)
        return [
            ticket
            for ticket in self._tickets.list_for_user_event(hold.user_id, hold.event_id)
            if ticket.seat_ref in refs
        ]
