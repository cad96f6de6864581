"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in reservations/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from reservations.domain.value_objects import (
    Capacity,
    EntryId,
    EventId,
    HoldId,
    JobId,
    Money,
    SeatingPlanId,
    SeatRef,
    TicketId,
)


class SeatStatus(Enum):
    AVAILABLE = "available"
    HELD = "held"
    SOLD = "sold"


class SeatCategory(Enum):
    VIP = "vip"
    PREMIUM = "premium"
    STANDARD = "standard"
    ECONOMY = "economy"


class EntryStatus(Enum):
    WAITING = "waiting"
    OFFERED = "offered"
    PURCHASED = "purchased"
    EXPIRED = "expired"


class TicketStatus(Enum):
    VALID = "valid"
    USED = "used"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


# Ticket statuses only ever move forward; nothing returns to VALID.
TICKET_TRANSITIONS: dict[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.VALID: frozenset(
        {TicketStatus.USED, TicketStatus.REFUNDED, TicketStatus.CANCELLED}
    ),
    TicketStatus.USED: frozenset({TicketStatus.REFUNDED}),
    TicketStatus.REFUNDED: frozenset(),
    TicketStatus.CANCELLED: frozenset(),
}

COMMITTED_TICKET_STATUSES = (TicketStatus.VALID, TicketStatus.USED)


class JobKind(Enum):
    EXPIRE_OFFER = "expire_offer"
    EXPIRE_HOLD = "expire_hold"


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event.

    A seated event takes its capacity from materialized seats; a flat event
    from ``total_tickets``.
    """

    id: EventId
    name: str
    price: Money
    total_tickets: Capacity
    organizer_id: str
    created_at: datetime
    seating_plan_id: SeatingPlanId | None = None
    is_cancelled: bool = False

    @property
    def is_seated(self) -> bool:
        return self.seating_plan_id is not None


@dataclass(frozen=True)
class RowPricing:
    """Per-row override of a section's price and category."""

    row: str
    price: Money
    category: SeatCategory | None = None


@dataclass(frozen=True)
class Section:
    """A block of seats: every row crossed with every seat label."""

    id: str
    name: str
    rows: tuple[str, ...]
    seat_labels: tuple[str, ...]
    price: Money
    category: SeatCategory | None = None
    row_pricing: tuple[RowPricing, ...] = ()

    @property
    def capacity(self) -> int:
        return len(self.rows) * len(self.seat_labels)

    def pricing_for(self, row: str) -> tuple[Money, SeatCategory | None]:
        """Resolve the price and category of seats in ``row``."""
        for override in self.row_pricing:
            if override.row == row:
                return override.price, override.category or self.category
        return self.price, self.category


@dataclass(frozen=True)
class SeatingPlan:
    """Reusable layout template, decoupled from any event until materialized."""

    id: SeatingPlanId
    name: str
    sections: tuple[Section, ...]
    owner_id: str = ""

    @property
    def capacity(self) -> int:
        return sum(section.capacity for section in self.sections)


@dataclass(frozen=True)
class Seat:
    """A materialized seat belonging to one event."""

    event_id: EventId
    ref: SeatRef
    status: SeatStatus
    price: Money
    category: SeatCategory | None = None
    hold_expires_at: datetime | None = None


@dataclass(frozen=True)
class WaitingListEntry:
    """A user's place in an event's FIFO queue."""

    id: EntryId
    event_id: EventId
    user_id: str
    status: EntryStatus
    created_at: datetime
    offer_expires_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status is not EntryStatus.EXPIRED


@dataclass(frozen=True)
class QueuePosition:
    entry: WaitingListEntry
    position: int


@dataclass(frozen=True)
class SeatHold:
    """A time-boxed provisional claim on a fixed list of seats."""

    id: HoldId
    event_id: EventId
    user_id: str
    seats: tuple[SeatRef, ...]
    expires_at: datetime
    created_at: datetime
    confirmed: bool = False


@dataclass(frozen=True)
class Ticket:
    """Domain representation of an issued Ticket."""

    id: TicketId
    event_id: EventId
    user_id: str
    status: TicketStatus
    purchased_at: datetime
    amount: Money
    payment_reference: str = ""
    seat_ref: SeatRef | None = None

    @property
    def is_committed(self) -> bool:
        return self.status in COMMITTED_TICKET_STATUSES

    def can_transition_to(self, status: TicketStatus) -> bool:
        return status in TICKET_TRANSITIONS[self.status]


@dataclass(frozen=True)
class SeatSummary:
    """Aggregate of an event's materialized seats at a point in time."""

    total: int
    sold: int
    held: int
    min_price: Money | None = None


@dataclass(frozen=True)
class Availability:
    """Remaining capacity of an event, recomputed from the ledgers."""

    total_capacity: int
    committed_count: int
    pending_count: int
    min_price: Money | None = None

    @property
    def remaining(self) -> int:
        return max(0, self.total_capacity - (self.committed_count + self.pending_count))

    @property
    def is_sold_out(self) -> bool:
        return self.remaining <= 0


@dataclass(frozen=True)
class ScheduledJob:
    """A deferred callback persisted until it runs."""

    id: JobId
    kind: JobKind
    run_at: datetime
    payload: dict = field(default_factory=dict)
    attempts: int = 0


@dataclass(frozen=True)
class SeatMapRow:
    row: str
    seats: tuple[Seat, ...]


@dataclass(frozen=True)
class SeatMapSection:
    id: str
    name: str
    rows: tuple[SeatMapRow, ...]


@dataclass(frozen=True)
class SeatMap:
    """An event's seats grouped by section then row, for seat pickers."""

    sections: tuple[SeatMapSection, ...]
    min_price: Money | None = None
