from reservations.domain.models import (
    Availability,
    EntryStatus,
    Event,
    JobKind,
    QueuePosition,
    RowPricing,
    ScheduledJob,
    Seat,
    SeatCategory,
    SeatHold,
    SeatMap,
    SeatMapRow,
    SeatMapSection,
    SeatingPlan,
    SeatStatus,
    SeatSummary,
    Section,
    Ticket,
    TicketStatus,
    WaitingListEntry,
)
from reservations.domain.value_objects import (
    Capacity,
    EntryId,
    EventId,
    HoldId,
    JobId,
    Money,
    PaymentFact,
    SeatingPlanId,
    SeatRef,
    TicketId,
)

__all__ = [
    "Availability",
    "EntryStatus",
    "Event",
    "JobKind",
    "QueuePosition",
    "RowPricing",
    "ScheduledJob",
    "Seat",
    "SeatCategory",
    "SeatHold",
    "SeatMap",
    "SeatMapRow",
    "SeatMapSection",
    "SeatingPlan",
    "SeatStatus",
    "SeatSummary",
    "Section",
    "Ticket",
    "TicketStatus",
    "WaitingListEntry",
    "Capacity",
    "EntryId",
    "EventId",
    "HoldId",
    "JobId",
    "Money",
    "PaymentFact",
    "SeatingPlanId",
    "SeatRef",
    "TicketId",
]
