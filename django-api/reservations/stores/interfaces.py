"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Writes only touch the
records named; callers combine them inside ``UnitOfWork.atomic()``.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager
from datetime import datetime

from reservations.domain import (
    Capacity,
    EntryId,
    EntryStatus,
    Event,
    EventId,
    HoldId,
    JobId,
    JobKind,
    ScheduledJob,
    Seat,
    SeatHold,
    SeatingPlan,
    SeatingPlanId,
    SeatRef,
    SeatSummary,
    Ticket,
    TicketId,
    TicketStatus,
    WaitingListEntry,
)


class UnitOfWork(ABC):
    """Groups store calls into one atomic unit."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Return a context manager that commits or rolls back as a whole."""
        ...


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def lock_event(self, event_id: EventId) -> Event | None:
        """Return an event and hold its row lock until the transaction ends."""
        ...

    @abstractmethod
    def set_total_tickets(self, event_id: EventId, total: Capacity) -> None:
        ...

    @abstractmethod
    def mark_cancelled(self, event_id: EventId) -> None:
        ...


class SeatingPlanStore(ABC):
    """Interface for seating plan templates."""

    @abstractmethod
    def get_plan(self, plan_id: SeatingPlanId) -> SeatingPlan | None:
        """Return a plan by ID, or None if not found."""
        ...

    @abstractmethod
    def add_plan(self, plan: SeatingPlan) -> SeatingPlan:
        ...

    @abstractmethod
    def list_plans(self, owner_id: str) -> list[SeatingPlan]:
        """Return the owner's plans, newest first."""
        ...


class SeatStore(ABC):
    """Interface for an event's materialized seats."""

    @abstractmethod
    def list_seats(self, event_id: EventId) -> list[Seat]:
        """Return all seats ordered by section, row and seat number."""
        ...

    @abstractmethod
    def get_seats(
        self, event_id: EventId, refs: Iterable[SeatRef], *, for_update: bool = False
    ) -> dict[SeatRef, Seat]:
        """Return the requested seats keyed by ref; unknown refs are absent."""
        ...

    @abstractmethod
    def summarize(self, event_id: EventId, now: datetime) -> SeatSummary:
        """Count total, sold and live-held seats and find the cheapest."""
        ...

    @abstractmethod
    def replace_seats(self, event_id: EventId, seats: list[Seat]) -> None:
        """Delete every seat of the event and insert ``seats``."""
        ...

    @abstractmethod
    def hold_seats(
        self, event_id: EventId, refs: Iterable[SeatRef], expires_at: datetime
    ) -> int:
        """Move available seats to held; return how many moved."""
        ...

    @abstractmethod
    def free_seats(self, event_id: EventId, refs: Iterable[SeatRef]) -> int:
        """Move held seats back to available; return how many moved."""
        ...

    @abstractmethod
    def sell_seats(self, event_id: EventId, refs: Iterable[SeatRef]) -> int:
        """Move held seats to sold; return how many moved."""
        ...


class WaitingListStore(ABC):
    """Interface for waiting list entries."""

    @abstractmethod
    def get_entry(self, entry_id: EntryId, *, for_update: bool = False) -> WaitingListEntry | None:
        ...

    @abstractmethod
    def get_active_entry(self, event_id: EventId, user_id: str) -> WaitingListEntry | None:
        """Return the user's non-expired entry for the event, if any."""
        ...

    @abstractmethod
    def add_entry(
        self,
        event_id: EventId,
        user_id: str,
        status: EntryStatus,
        created_at: datetime,
        offer_expires_at: datetime | None = None,
    ) -> WaitingListEntry:
        """Insert an entry.

        Creation timestamps are strictly increasing per event.

        Raises:
            DuplicateEntryError: If the user already has an active entry.
        """
        ...

    @abstractmethod
    def oldest_waiting(self, event_id: EventId, limit: int) -> list[WaitingListEntry]:
        """Return up to ``limit`` waiting entries, oldest first."""
        ...

    @abstractmethod
    def transition(
        self,
        entry_id: EntryId,
        expected: EntryStatus,
        status: EntryStatus,
        offer_expires_at: datetime | None = None,
    ) -> bool:
        """Set ``status`` only if the entry is still ``expected``."""
        ...

    @abstractmethod
    def count_ahead(self, event_id: EventId, created_at: datetime) -> int:
        """Count waiting or offered entries created strictly before ``created_at``."""
        ...

    @abstractmethod
    def count_live_offers(self, event_id: EventId, now: datetime) -> int:
        ...

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[WaitingListEntry]:
        ...

    @abstractmethod
    def delete_for_event(self, event_id: EventId) -> int:
        ...


class SeatHoldStore(ABC):
    """Interface for seat holds."""

    @abstractmethod
    def get_hold(self, hold_id: HoldId, *, for_update: bool = False) -> SeatHold | None:
        ...

    @abstractmethod
    def add_hold(self, hold: SeatHold) -> SeatHold:
        ...

    @abstractmethod
    def mark_confirmed(self, hold_id: HoldId) -> None:
        ...

    @abstractmethod
    def delete_hold(self, hold_id: HoldId) -> None:
        ...

    @abstractmethod
    def active_hold(self, event_id: EventId, user_id: str, now: datetime) -> SeatHold | None:
        """Return the user's unconfirmed, unexpired hold, if any."""
        ...

    @abstractmethod
    def unconfirmed_for_event(self, event_id: EventId) -> list[SeatHold]:
        ...


class TicketStore(ABC):
    """Interface for the append-only ticket ledger."""

    @abstractmethod
    def add_tickets(self, tickets: list[Ticket]) -> list[Ticket]:
        ...

    @abstractmethod
    def get_ticket(self, ticket_id: TicketId, *, for_update: bool = False) -> Ticket | None:
        ...

    @abstractmethod
    def set_status(self, ticket_id: TicketId, status: TicketStatus) -> None:
        ...

    @abstractmethod
    def count_committed(self, event_id: EventId) -> int:
        """Count valid and used tickets."""
        ...

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Ticket]:
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Ticket]:
        ...

    @abstractmethod
    def list_for_user_event(self, user_id: str, event_id: EventId) -> list[Ticket]:
        ...


class JobScheduler(ABC):
    """Durable deferred-callback store."""

    @abstractmethod
    def schedule(self, run_at: datetime, kind: JobKind, payload: dict) -> ScheduledJob:
        """Persist a job that becomes due at ``run_at``."""
        ...

    @abstractmethod
    def due_jobs(self, now: datetime, limit: int) -> list[ScheduledJob]:
        """Claim pending jobs whose ``run_at`` has passed, earliest first."""
        ...

    @abstractmethod
    def mark_done(self, job_id: JobId, now: datetime) -> None:
        ...

    @abstractmethod
    def mark_failed(self, job_id: JobId, retry_at: datetime, error: str) -> None:
        """Record the failure and push the job back to ``retry_at``."""
        ...
