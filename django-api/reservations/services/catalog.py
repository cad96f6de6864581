"""Catalog operations the reservation engine depends on.

Organizers own events and plans; these are the few writes that touch
inventory: snapshotting a plan into seats, resizing flat capacity and
cancelling an event.
"""

import logging

from reservations.domain import (
    Availability,
    Capacity,
    EventId,
    Seat,
    SeatingPlan,
    SeatingPlanId,
    SeatRef,
    SeatStatus,
    Section,
)
from reservations.domain.errors import (
    CapacityExceededError,
    EventHasActiveTicketsError,
    EventNotFoundError,
    EventNotSeatedError,
    SeatedEventError,
    SeatingPlanNotFoundError,
    SeatsAlreadyMaterializedError,
)
from reservations.domain.templates import PLAN_TEMPLATES
from reservations.services.availability import AvailabilityCalculator
from reservations.services.offers import OfferLifecycleManager
from reservations.stores.interfaces import (
    EventStore,
    SeatHoldStore,
    SeatingPlanStore,
    SeatStore,
    TicketStore,
    UnitOfWork,
    WaitingListStore,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for organizer-side inventory operations."""

    def __init__(
        self,
        uow: UnitOfWork,
        events: EventStore,
        plans: SeatingPlanStore,
        seats: SeatStore,
        holds: SeatHoldStore,
        waiting_list: WaitingListStore,
        tickets: TicketStore,
        availability: AvailabilityCalculator,
        offers: OfferLifecycleManager,
    ) -> None:
        self._uow = uow
        self._events = events
        self._plans = plans
        self._seats = seats
        self._holds = holds
        self._waiting_list = waiting_list
        self._tickets = tickets
        self._availability = availability
        self._offers = offers

    def create_seating_plan(
        self, name: str, sections: list[Section], owner_id: str = ""
    ) -> SeatingPlan:
        ids = [section.id for section in sections]
        if len(set(ids)) != len(ids):
            raise ValueError("Section ids must be unique within a plan")
        plan = SeatingPlan(
            id=SeatingPlanId.new(),
            name=name,
            sections=tuple(sections),
            owner_id=owner_id,
        )
        return self._plans.add_plan(plan)

    def create_plan_from_template(
        self, template: str, name: str, owner_id: str = ""
    ) -> SeatingPlan:
        try:
            sections = PLAN_TEMPLATES[template]
        except KeyError:
            raise ValueError(f"Unknown seating plan template: {template}") from None
        return self.create_seating_plan(name, list(sections), owner_id)

    def list_seating_plans(self, owner_id: str) -> list[SeatingPlan]:
        return self._plans.list_plans(owner_id)

    def plan_capacity(self, plan_id: str | SeatingPlanId) -> int:
        """Return the number of seats a plan materializes into.

        Raises:
            SeatingPlanNotFoundError: If the plan does not exist.
        """
        parsed = SeatingPlanId.coerce(plan_id)
        plan = self._plans.get_plan(parsed)
        if plan is None:
            raise SeatingPlanNotFoundError(str(parsed))
        return plan.capacity

    def materialize_seats(self, event_id: str | EventId) -> int:
        """Expand the event's seating plan into per-event seats.

        Existing seats are replaced wholesale, which is only allowed while
        none of them is held or sold.

        Raises:
            EventNotFoundError: If the event does not exist.
            EventNotSeatedError: If the event has no seating plan.
            SeatingPlanNotFoundError: If the plan has gone missing.
            SeatsAlreadyMaterializedError: If a seat is already held or sold.
        """
        parsed = EventId.coerce(event_id)
        with self._uow.atomic():
            event = self._events.lock_event(parsed)
            if event is None:
                raise EventNotFoundError(str(parsed))
            if not event.is_seated:
                raise EventNotSeatedError(str(parsed))
            plan = self._plans.get_plan(event.seating_plan_id)
            if plan is None:
                raise SeatingPlanNotFoundError(str(event.seating_plan_id))
            if any(
                seat.status is not SeatStatus.AVAILABLE
                for seat in self._seats.list_seats(parsed)
            ):
                raise SeatsAlreadyMaterializedError(str(parsed))

            seats = []
            for section in plan.sections:
                for row in section.rows:
                    price, category = section.pricing_for(row)
                    seats.extend(
                        Seat(
                            event_id=parsed,
                            ref=SeatRef(section.id, row, label),
                            status=SeatStatus.AVAILABLE,
                            price=price,
                            category=category,
                        )
                        for label in section.seat_labels
                    )
            self._seats.replace_seats(parsed, seats)
            self._events.set_total_tickets(parsed, Capacity(len(seats)))

        logger.info(
            "catalog.seats_materialized",
            extra={"event_id": str(parsed), "seats": len(seats)},
        )
        return len(seats)

    def change_capacity(self, event_id: str | EventId, total_tickets: int) -> Availability:
        """Resize a flat event, then offer any new room to the queue.

        Raises:
            EventNotFoundError: If the event does not exist.
            SeatedEventError: If capacity comes from a seating plan.
            CapacityExceededError: If fewer than the sold tickets would remain.
        """
        parsed = EventId.coerce(event_id)
        total = Capacity(total_tickets)
        with self._uow.atomic():
            event = self._events.lock_event(parsed)
            if event is None:
                raise EventNotFoundError(str(parsed))
            if event.is_seated:
                raise SeatedEventError(
                    str(parsed), "Seated capacity is defined by the seating plan"
                )
            committed = self._tickets.count_committed(parsed)
            if total.value < committed:
                raise CapacityExceededError(total.value, committed)
            self._events.set_total_tickets(parsed, total)
            event = self._events.lock_event(parsed)
            self._offers.promote_locked(event)
            return self._availability.for_event(event)

    def cancel_event(self, event_id: str | EventId) -> None:
        """Cancel an event that has no live tickets and clear its queue.

        Raises:
            EventNotFoundError: If the event does not exist.
            EventHasActiveTicketsError: If valid or used tickets remain.
        """
        parsed = EventId.coerce(event_id)
        with self._uow.atomic():
            event = self._events.lock_event(parsed)
            if event is None:
                raise EventNotFoundError(str(parsed))
            committed = self._tickets.count_committed(parsed)
            if committed:
                raise EventHasActiveTicketsError(str(parsed), committed)
            self._events.mark_cancelled(parsed)
            removed = self._waiting_list.delete_for_event(parsed)
            for hold in self._holds.unconfirmed_for_event(parsed):
                self._seats.free_seats(parsed, hold.seats)
                self._holds.delete_hold(hold.id)

        logger.info(
            "catalog.event_cancelled",
            extra={"event_id": str(parsed), "entries_removed": removed},
        )
