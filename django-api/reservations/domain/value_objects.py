"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self
from uuid import UUID, uuid4

from reservations.domain.errors import InvalidIdError


@dataclass(frozen=True)
class _Identifier:
    """UUID-backed identifier shared by all aggregates."""

    value: UUID

    kind = "resource"

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    @classmethod
    def coerce(cls, value: "str | UUID | Self") -> Self:
        """Accept an identifier, a UUID or its string form.

        Raises:
            InvalidIdError: If the value is not a valid UUID.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, UUID):
            return cls(value=value)
        try:
            return cls.from_string(str(value))
        except ValueError:
            raise InvalidIdError(cls.kind) from None

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventId(_Identifier):
    """Unique identifier for an Event."""

    kind = "event"


@dataclass(frozen=True)
class SeatingPlanId(_Identifier):
    """Unique identifier for a SeatingPlan."""

    kind = "seating plan"


@dataclass(frozen=True)
class EntryId(_Identifier):
    """Unique identifier for a WaitingListEntry."""

    kind = "waiting list entry"


@dataclass(frozen=True)
class HoldId(_Identifier):
    """Unique identifier for a SeatHold."""

    kind = "hold"


@dataclass(frozen=True)
class TicketId(_Identifier):
    """Unique identifier for a Ticket."""

    kind = "ticket"


@dataclass(frozen=True)
class JobId(_Identifier):
    """Unique identifier for a ScheduledJob."""

    kind = "job"


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True, order=True)
class SeatRef:
    """Coordinates of one seat inside an event's materialized seating."""

    section_id: str
    row: str
    seat_number: str

    def __post_init__(self) -> None:
        if not (self.section_id and self.row and self.seat_number):
            raise ValueError("Seat coordinates cannot be blank")

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        return cls(
            section_id=str(data["section_id"]),
            row=str(data["row"]),
            seat_number=str(data["seat_number"]),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "section_id": self.section_id,
            "row": self.row,
            "seat_number": self.seat_number,
        }

    def __str__(self) -> str:
        return f"{self.section_id}/{self.row}{self.seat_number}"


@dataclass(frozen=True)
class PaymentFact:
    """Confirmation handed over by the payment collaborator."""

    amount: Money
    external_reference: str = ""
