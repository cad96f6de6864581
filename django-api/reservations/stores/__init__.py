from reservations.stores.django_store import (
    DjangoEventStore,
    DjangoJobScheduler,
    DjangoSeatHoldStore,
    DjangoSeatingPlanStore,
    DjangoSeatStore,
    DjangoTicketStore,
    DjangoUnitOfWork,
    DjangoWaitingListStore,
)

__all__ = [
    "DjangoEventStore",
    "DjangoJobScheduler",
    "DjangoSeatHoldStore",
    "DjangoSeatingPlanStore",
    "DjangoSeatStore",
    "DjangoTicketStore",
    "DjangoUnitOfWork",
    "DjangoWaitingListStore",
]
