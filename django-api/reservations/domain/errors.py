"""Domain error codes for the reservations module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_ID = "INVALID_ID"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    SEATING_PLAN_NOT_FOUND = "SEATING_PLAN_NOT_FOUND"
    ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
    HOLD_NOT_FOUND = "HOLD_NOT_FOUND"
    SEAT_NOT_FOUND = "SEAT_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    SEAT_UNAVAILABLE = "SEAT_UNAVAILABLE"
    HOLD_NOT_OWNED = "HOLD_NOT_OWNED"
    HOLD_EXPIRED = "HOLD_EXPIRED"
    OFFER_EXPIRED = "OFFER_EXPIRED"
    SEATS_ALREADY_MATERIALIZED = "SEATS_ALREADY_MATERIALIZED"
    EVENT_HAS_ACTIVE_TICKETS = "EVENT_HAS_ACTIVE_TICKETS"
    INVALID_OFFER_STATE = "INVALID_OFFER_STATE"
    EVENT_CANCELLED = "EVENT_CANCELLED"
    EVENT_NOT_SEATED = "EVENT_NOT_SEATED"
    SEATED_EVENT = "SEATED_EVENT"
    HOLD_INTEGRITY = "HOLD_INTEGRITY"
    INVALID_TICKET_TRANSITION = "INVALID_TICKET_TRANSITION"
    INVALID_SEAT_SELECTION = "INVALID_SEAT_SELECTION"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str = "resource") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )
        self.kind = kind


class NotFoundError(DomainError):
    """A referenced event, entry, hold, seat or ticket does not exist."""


class ConflictError(DomainError):
    """The request collides with another claim on the same inventory."""


class InvalidStateError(DomainError):
    """The entity is not in a state that permits the transition."""


class CapacityExceededError(DomainError):
    """Raised when capacity would drop below what is already sold."""

    def __init__(self, requested: int, committed: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message=f"Cannot reduce capacity below {committed} tickets already sold",
        )
        self.requested = requested
        self.committed = committed


class EventNotFoundError(NotFoundError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")
        self.event_id = event_id


class SeatingPlanNotFoundError(NotFoundError):
    """Raised when a seating plan is not found."""

    def __init__(self, plan_id: str) -> None:
        super().__init__(
            code=ErrorCode.SEATING_PLAN_NOT_FOUND,
            message="Seating plan not found",
        )
        self.plan_id = plan_id


class EntryNotFoundError(NotFoundError):
    """Raised when a waiting list entry is not found."""

    def __init__(self, entry_id: str) -> None:
        super().__init__(
            code=ErrorCode.ENTRY_NOT_FOUND,
            message="Waiting list entry not found",
        )
        self.entry_id = entry_id


class HoldNotFoundError(NotFoundError):
    """Raised when a seat hold is not found."""

    def __init__(self, hold_id: str) -> None:
        super().__init__(code=ErrorCode.HOLD_NOT_FOUND, message="Hold not found")
        self.hold_id = hold_id


class SeatNotFoundError(NotFoundError):
    """Raised when a requested seat was never materialized."""

    def __init__(self, seat: str) -> None:
        super().__init__(code=ErrorCode.SEAT_NOT_FOUND, message=f"Seat {seat} not found")
        self.seat = seat


class TicketNotFoundError(NotFoundError):
    """Raised when a ticket is not found."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(code=ErrorCode.TICKET_NOT_FOUND, message="Ticket not found")
        self.ticket_id = ticket_id


class DuplicateEntryError(ConflictError):
    """Raised when the user already has an active entry for the event."""

    def __init__(self, event_id: str, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_ENTRY,
            message="Already in waiting list for this event",
        )
        self.event_id = event_id
        self.user_id = user_id


class SeatUnavailableError(ConflictError):
    """Raised when a requested seat is held or sold."""

    def __init__(self, seats: list[str]) -> None:
        super().__init__(
            code=ErrorCode.SEAT_UNAVAILABLE,
            message=f"Seats not available: {', '.join(seats)}",
        )
        self.seats = seats


class HoldOwnershipError(ConflictError):
    """Raised when a hold is used by someone other than its owner."""

    def __init__(self, hold_id: str) -> None:
        super().__init__(
            code=ErrorCode.HOLD_NOT_OWNED,
            message="Hold does not belong to user",
        )
        self.hold_id = hold_id


class HoldExpiredError(ConflictError):
    """Raised when confirming a hold whose window has passed."""

    def __init__(self, hold_id: str) -> None:
        super().__init__(code=ErrorCode.HOLD_EXPIRED, message="Hold expired")
        self.hold_id = hold_id


class OfferExpiredError(ConflictError):
    """Raised when purchasing against an offer whose window has passed."""

    def __init__(self, entry_id: str) -> None:
        super().__init__(
            code=ErrorCode.OFFER_EXPIRED,
            message="Ticket offer has expired",
        )
        self.entry_id = entry_id


class SeatsAlreadyMaterializedError(ConflictError):
    """Raised when re-materializing seats that are already held or sold."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.SEATS_ALREADY_MATERIALIZED,
            message="Seats are already held or sold for this event",
        )
        self.event_id = event_id


class EventHasActiveTicketsError(ConflictError):
    """Raised when cancelling an event that still has valid tickets."""

    def __init__(self, event_id: str, count: int) -> None:
        super().__init__(
            code=ErrorCode.EVENT_HAS_ACTIVE_TICKETS,
            message="Cannot cancel event with active tickets. Refund all tickets first",
        )
        self.event_id = event_id
        self.count = count


class InvalidOfferStateError(InvalidStateError):
    """Raised when an entry is not an offer owned by the caller."""

    def __init__(self, entry_id: str, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_OFFER_STATE, message=reason)
        self.entry_id = entry_id


class EventCancelledError(InvalidStateError):
    """Raised when operating on a cancelled event."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_CANCELLED,
            message="Event is no longer active",
        )
        self.event_id = event_id


class EventNotSeatedError(InvalidStateError):
    """Raised when a seat operation targets a flat-ticket event."""

    def __init__(self, event_id: str) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_SEATED, message="Event is not seated")
        self.event_id = event_id


class SeatedEventError(InvalidStateError):
    """Raised when a flat-ticket operation targets a seated event."""

    def __init__(
        self, event_id: str, message: str = "Seated events are booked by seat selection"
    ) -> None:
        super().__init__(code=ErrorCode.SEATED_EVENT, message=message)
        self.event_id = event_id


class HoldIntegrityError(InvalidStateError):
    """Raised when a held seat is found in an unexpected state on confirm."""

    def __init__(self, hold_id: str, seat: str) -> None:
        super().__init__(
            code=ErrorCode.HOLD_INTEGRITY,
            message=f"Seat {seat} is no longer held",
        )
        self.hold_id = hold_id
        self.seat = seat


class InvalidTicketTransitionError(InvalidStateError):
    """Raised when a ticket status change would not be monotonic."""

    def __init__(self, ticket_id: str, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TICKET_TRANSITION,
            message=f"Cannot change ticket from {current} to {target}",
        )
        self.ticket_id = ticket_id


class InvalidSeatSelectionError(DomainError):
    """Raised when a hold request lists no seats or repeats a seat."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_SEAT_SELECTION, message=reason)
