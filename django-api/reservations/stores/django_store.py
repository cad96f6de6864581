"""Django ORM implementation of the reservation stores."""

import operator
from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import Decimal
from functools import reduce

from django.db import IntegrityError, transaction
from django.db.models import Count, Max, Min, Q

from reservations import models
from reservations.domain import (
    Capacity,
    EntryId,
    EntryStatus,
    Event,
    EventId,
    HoldId,
    JobId,
    JobKind,
    Money,
    RowPricing,
    ScheduledJob,
    Seat,
    SeatCategory,
    SeatHold,
    SeatingPlan,
    SeatingPlanId,
    SeatRef,
    SeatStatus,
    SeatSummary,
    Section,
    Ticket,
    TicketId,
    TicketStatus,
    WaitingListEntry,
)
from reservations.domain.errors import DuplicateEntryError
from reservations.stores.interfaces import (
    EventStore,
    JobScheduler,
    SeatHoldStore,
    SeatingPlanStore,
    SeatStore,
    TicketStore,
    UnitOfWork,
    WaitingListStore,
)


def _category(value: str | None) -> SeatCategory | None:
    return SeatCategory(value) if value else None


def _seat_filter(refs: Iterable[SeatRef]) -> Q | None:
    clauses = [
        Q(section_id=ref.section_id, row=ref.row, seat_number=ref.seat_number)
        for ref in refs
    ]
    if not clauses:
        return None
    return reduce(operator.or_, clauses)


class DjangoUnitOfWork(UnitOfWork):
    def atomic(self):
        return transaction.atomic()


class DjangoEventStore(EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    @staticmethod
    def _to_domain(row: models.Event) -> Event:
        return Event(
            id=EventId(row.id),
            name=row.name,
            price=Money(row.price),
            total_tickets=Capacity(row.total_tickets),
            organizer_id=row.organizer_id,
            created_at=row.created_at,
            seating_plan_id=(
                SeatingPlanId(row.seating_plan_id) if row.seating_plan_id else None
            ),
            is_cancelled=row.is_cancelled,
        )

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return self._to_domain(row) if row else None

    def lock_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.select_for_update().filter(pk=event_id.value).first()
        return self._to_domain(row) if row else None

    def set_total_tickets(self, event_id: EventId, total: Capacity) -> None:
        models.Event.objects.filter(pk=event_id.value).update(total_tickets=total.value)

    def mark_cancelled(self, event_id: EventId) -> None:
        models.Event.objects.filter(pk=event_id.value).update(is_cancelled=True)


class DjangoSeatingPlanStore(SeatingPlanStore):
    @staticmethod
    def _section_to_domain(data: dict) -> Section:
        return Section(
            id=data["id"],
            name=data.get("name", data["id"]),
            rows=tuple(data["rows"]),
            seat_labels=tuple(data["seat_labels"]),
            price=Money(Decimal(str(data["price"]))),
            category=_category(data.get("category")),
            row_pricing=tuple(
                RowPricing(
                    row=item["row"],
                    price=Money(Decimal(str(item["price"]))),
                    category=_category(item.get("category")),
                )
                for item in data.get("row_pricing", [])
            ),
        )

    @staticmethod
    def _section_to_json(section: Section) -> dict:
        return {
            "id": section.id,
            "name": section.name,
            "rows": list(section.rows),
            "seat_labels": list(section.seat_labels),
            "price": str(section.price),
            "category": section.category.value if section.category else None,
            "row_pricing": [
                {
                    "row": item.row,
                    "price": str(item.price),
                    "category": item.category.value if item.category else None,
                }
                for item in section.row_pricing
            ],
        }

    def _to_domain(self, row: models.SeatingPlan) -> SeatingPlan:
        return SeatingPlan(
            id=SeatingPlanId(row.id),
            name=row.name,
            sections=tuple(self._section_to_domain(s) for s in row.sections),
            owner_id=row.owner_id,
        )

    def get_plan(self, plan_id: SeatingPlanId) -> SeatingPlan | None:
        row = models.SeatingPlan.objects.filter(pk=plan_id.value).first()
        return self._to_domain(row) if row else None

    def add_plan(self, plan: SeatingPlan) -> SeatingPlan:
        row = models.SeatingPlan.objects.create(
            id=plan.id.value,
            name=plan.name,
            owner_id=plan.owner_id,
            sections=[self._section_to_json(s) for s in plan.sections],
        )
        return self._to_domain(row)

    def list_plans(self, owner_id: str) -> list[SeatingPlan]:
        rows = models.SeatingPlan.objects.filter(owner_id=owner_id).order_by("-created_at")
        return [self._to_domain(row) for row in rows]


class DjangoSeatStore(SeatStore):
    @staticmethod
    def _to_domain(row: models.Seat) -> Seat:
        return Seat(
            event_id=EventId(row.event_id),
            ref=SeatRef(row.section_id, row.row, row.seat_number),
            status=SeatStatus(row.status),
            price=Money(row.price),
            category=_category(row.category),
            hold_expires_at=row.hold_expires_at,
        )

    def list_seats(self, event_id: EventId) -> list[Seat]:
        rows = models.Seat.objects.filter(event_id=event_id.value).order_by(
            "section_id", "row", "seat_number"
        )
        return [self._to_domain(row) for row in rows]

    def get_seats(
        self, event_id: EventId, refs: Iterable[SeatRef], *, for_update: bool = False
    ) -> dict[SeatRef, Seat]:
        where = _seat_filter(refs)
        if where is None:
            return {}
        qs = models.Seat.objects.filter(where, event_id=event_id.value)
        if for_update:
            qs = qs.select_for_update()
        seats = (self._to_domain(row) for row in qs)
        return {seat.ref: seat for seat in seats}

    def summarize(self, event_id: EventId, now: datetime) -> SeatSummary:
        totals = models.Seat.objects.filter(event_id=event_id.value).aggregate(
            total=Count("id"),
            sold=Count("id", filter=Q(status=models.Seat.Status.SOLD)),
            held=Count(
                "id",
                filter=Q(status=models.Seat.Status.HELD, hold_expires_at__gt=now),
            ),
            min_price=Min("price"),
        )
        min_price = totals["min_price"]
        return SeatSummary(
            total=totals["total"],
            sold=totals["sold"],
            held=totals["held"],
            min_price=Money(min_price) if min_price is not None else None,
        )

    def replace_seats(self, event_id: EventId, seats: list[Seat]) -> None:
        models.Seat.objects.filter(event_id=event_id.value).delete()
        models.Seat.objects.bulk_create(
            [
                models.Seat(
                    event_id=event_id.value,
                    section_id=seat.ref.section_id,
                    row=seat.ref.row,
                    seat_number=seat.ref.seat_number,
                    status=seat.status.value,
                    hold_expires_at=seat.hold_expires_at,
                    price=seat.price.amount,
                    category=seat.category.value if seat.category else "",
                )
                for seat in seats
            ]
        )

    def _move(
        self,
        event_id: EventId,
        refs: Iterable[SeatRef],
        source: str,
        **changes,
    ) -> int:
        where = _seat_filter(refs)
        if where is None:
            return 0
        return models.Seat.objects.filter(
            where, event_id=event_id.value, status=source
        ).update(**changes)

    def hold_seats(
        self, event_id: EventId, refs: Iterable[SeatRef], expires_at: datetime
    ) -> int:
        return self._move(
            event_id,
            refs,
            models.Seat.Status.AVAILABLE,
            status=models.Seat.Status.HELD,
            hold_expires_at=expires_at,
        )

    def free_seats(self, event_id: EventId, refs: Iterable[SeatRef]) -> int:
        return self._move(
            event_id,
            refs,
            models.Seat.Status.HELD,
            status=models.Seat.Status.AVAILABLE,
            hold_expires_at=None,
        )

    def sell_seats(self, event_id: EventId, refs: Iterable[SeatRef]) -> int:
        return self._move(
            event_id,
            refs,
            models.Seat.Status.HELD,
            status=models.Seat.Status.SOLD,
            hold_expires_at=None,
        )


class DjangoWaitingListStore(WaitingListStore):
    @staticmethod
    def _to_domain(row: models.WaitingListEntry) -> WaitingListEntry:
        return WaitingListEntry(
            id=EntryId(row.id),
            event_id=EventId(row.event_id),
            user_id=row.user_id,
            status=EntryStatus(row.status),
            created_at=row.created_at,
            offer_expires_at=row.offer_expires_at,
        )

    def get_entry(
        self, entry_id: EntryId, *, for_update: bool = False
    ) -> WaitingListEntry | None:
        qs = models.WaitingListEntry.objects.filter(pk=entry_id.value)
        if for_update:
            qs = qs.select_for_update()
        row = qs.first()
        return self._to_domain(row) if row else None

    def get_active_entry(self, event_id: EventId, user_id: str) -> WaitingListEntry | None:
        row = (
            models.WaitingListEntry.objects.filter(event_id=event_id.value, user_id=user_id)
            .exclude(status=models.WaitingListEntry.Status.EXPIRED)
            .first()
        )
        return self._to_domain(row) if row else None

    def add_entry(
        self,
        event_id: EventId,
        user_id: str,
        status: EntryStatus,
        created_at: datetime,
        offer_expires_at: datetime | None = None,
    ) -> WaitingListEntry:
        latest = models.WaitingListEntry.objects.filter(
            event_id=event_id.value
        ).aggregate(latest=Max("created_at"))["latest"]
        if latest is not None and created_at <= latest:
            created_at = latest + timedelta(microseconds=1)
        try:
            with transaction.atomic():
                row = models.WaitingListEntry.objects.create(
                    event_id=event_id.value,
                    user_id=user_id,
                    status=status.value,
                    created_at=created_at,
                    offer_expires_at=offer_expires_at,
                )
        except IntegrityError:
            raise DuplicateEntryError(str(event_id), user_id) from None
        return self._to_domain(row)

    def oldest_waiting(self, event_id: EventId, limit: int) -> list[WaitingListEntry]:
        rows = models.WaitingListEntry.objects.filter(
            event_id=event_id.value,
            status=models.WaitingListEntry.Status.WAITING,
        ).order_by("created_at")[:limit]
        return [self._to_domain(row) for row in rows]

    def transition(
        self,
        entry_id: EntryId,
        expected: EntryStatus,
        status: EntryStatus,
        offer_expires_at: datetime | None = None,
    ) -> bool:
        updated = models.WaitingListEntry.objects.filter(
            pk=entry_id.value, status=expected.value
        ).update(status=status.value, offer_expires_at=offer_expires_at)
        return updated == 1

    def count_ahead(self, event_id: EventId, created_at: datetime) -> int:
        return models.WaitingListEntry.objects.filter(
            event_id=event_id.value,
            status__in=[
                models.WaitingListEntry.Status.WAITING,
                models.WaitingListEntry.Status.OFFERED,
            ],
            created_at__lt=created_at,
        ).count()

    def count_live_offers(self, event_id: EventId, now: datetime) -> int:
        return models.WaitingListEntry.objects.filter(
            event_id=event_id.value,
            status=models.WaitingListEntry.Status.OFFERED,
            offer_expires_at__gt=now,
        ).count()

    def list_for_user(self, user_id: str) -> list[WaitingListEntry]:
        rows = models.WaitingListEntry.objects.filter(user_id=user_id).order_by("created_at")
        return [self._to_domain(row) for row in rows]

    def delete_for_event(self, event_id: EventId) -> int:
        deleted, _ = models.WaitingListEntry.objects.filter(event_id=event_id.value).delete()
        return deleted


class DjangoSeatHoldStore(SeatHoldStore):
    @staticmethod
    def _to_domain(row: models.SeatHold) -> SeatHold:
        return SeatHold(
            id=HoldId(row.id),
            event_id=EventId(row.event_id),
            user_id=row.user_id,
            seats=tuple(SeatRef.from_dict(item) for item in row.seats),
            expires_at=row.expires_at,
            created_at=row.created_at,
            confirmed=row.confirmed,
        )

    def get_hold(self, hold_id: HoldId, *, for_update: bool = False) -> SeatHold | None:
        qs = models.SeatHold.objects.filter(pk=hold_id.value)
        if for_update:
            qs = qs.select_for_update()
        row = qs.first()
        return self._to_domain(row) if row else None

    def add_hold(self, hold: SeatHold) -> SeatHold:
        row = models.SeatHold.objects.create(
            id=hold.id.value,
            event_id=hold.event_id.value,
            user_id=hold.user_id,
            seats=[ref.to_dict() for ref in hold.seats],
            expires_at=hold.expires_at,
            confirmed=hold.confirmed,
            created_at=hold.created_at,
        )
        return self._to_domain(row)

    def mark_confirmed(self, hold_id: HoldId) -> None:
        models.SeatHold.objects.filter(pk=hold_id.value).update(confirmed=True)

    def delete_hold(self, hold_id: HoldId) -> None:
        models.SeatHold.objects.filter(pk=hold_id.value).delete()

    def active_hold(self, event_id: EventId, user_id: str, now: datetime) -> SeatHold | None:
        row = (
            models.SeatHold.objects.filter(
                event_id=event_id.value,
                user_id=user_id,
                confirmed=False,
                expires_at__gt=now,
            )
            .order_by("-created_at")
            .first()
        )
        return self._to_domain(row) if row else None

    def unconfirmed_for_event(self, event_id: EventId) -> list[SeatHold]:
        rows = models.SeatHold.objects.filter(event_id=event_id.value, confirmed=False)
        return [self._to_domain(row) for row in rows]


class DjangoTicketStore(TicketStore):
    @staticmethod
    def _to_domain(row: models.Ticket) -> Ticket:
        seat_ref = None
        if row.section_id:
            seat_ref = SeatRef(row.section_id, row.row, row.seat_number)
        return Ticket(
            id=TicketId(row.id),
            event_id=EventId(row.event_id),
            user_id=row.user_id,
            status=TicketStatus(row.status),
            purchased_at=row.purchased_at,
            amount=Money(row.amount),
            payment_reference=row.payment_reference,
            seat_ref=seat_ref,
        )

    def add_tickets(self, tickets: list[Ticket]) -> list[Ticket]:
        rows = models.Ticket.objects.bulk_create(
            [
                models.Ticket(
                    id=ticket.id.value,
                    event_id=ticket.event_id.value,
                    user_id=ticket.user_id,
                    status=ticket.status.value,
                    purchased_at=ticket.purchased_at,
                    amount=ticket.amount.amount,
                    payment_reference=ticket.payment_reference,
                    section_id=ticket.seat_ref.section_id if ticket.seat_ref else None,
                    row=ticket.seat_ref.row if ticket.seat_ref else None,
                    seat_number=ticket.seat_ref.seat_number if ticket.seat_ref else None,
                )
                for ticket in tickets
            ]
        )
        return [self._to_domain(row) for row in rows]

    def get_ticket(self, ticket_id: TicketId, *, for_update: bool = False) -> Ticket | None:
        qs = models.Ticket.objects.filter(pk=ticket_id.value)
        if for_update:
            qs = qs.select_for_update()
        row = qs.first()
        return self._to_domain(row) if row else None

    def set_status(self, ticket_id: TicketId, status: TicketStatus) -> None:
        models.Ticket.objects.filter(pk=ticket_id.value).update(status=status.value)

    def count_committed(self, event_id: EventId) -> int:
        return models.Ticket.objects.filter(
            event_id=event_id.value,
            status__in=[models.Ticket.Status.VALID, models.Ticket.Status.USED],
        ).count()

    def list_for_user(self, user_id: str) -> list[Ticket]:
        rows = models.Ticket.objects.filter(user_id=user_id).order_by("purchased_at")
        return [self._to_domain(row) for row in rows]

    def list_for_event(self, event_id: EventId) -> list[Ticket]:
        rows = models.Ticket.objects.filter(event_id=event_id.value).order_by("purchased_at")
        return [self._to_domain(row) for row in rows]

    def list_for_user_event(self, user_id: str, event_id: EventId) -> list[Ticket]:
        rows = models.Ticket.objects.filter(
            user_id=user_id, event_id=event_id.value
        ).order_by("purchased_at")
        return [self._to_domain(row) for row in rows]


class DjangoJobScheduler(JobScheduler):
    """Scheduled jobs persisted alongside the reservation state."""

    @staticmethod
    def _to_domain(row: models.ScheduledJob) -> ScheduledJob:
        return ScheduledJob(
            id=JobId(row.id),
            kind=JobKind(row.kind),
            run_at=row.run_at,
            payload=dict(row.payload),
            attempts=row.attempts,
        )

    def schedule(self, run_at: datetime, kind: JobKind, payload: dict) -> ScheduledJob:
        row = models.ScheduledJob.objects.create(kind=kind.value, payload=payload, run_at=run_at)
        return self._to_domain(row)

    def due_jobs(self, now: datetime, limit: int) -> list[ScheduledJob]:
        rows = (
            models.ScheduledJob.objects.select_for_update(skip_locked=True)
            .filter(status=models.ScheduledJob.Status.PENDING, run_at__lte=now)
            .order_by("run_at")[:limit]
        )
        return [self._to_domain(row) for row in rows]

    def mark_done(self, job_id: JobId, now: datetime) -> None:
        models.ScheduledJob.objects.filter(pk=job_id.value).update(
            status=models.ScheduledJob.Status.DONE, completed_at=now
        )

    def mark_failed(self, job_id: JobId, retry_at: datetime, error: str) -> None:
        row = models.ScheduledJob.objects.get(pk=job_id.value)
        row.attempts += 1
        row.last_error = error
        row.run_at = retry_at
        row.save(update_fields=["attempts", "last_error", "run_at"])
