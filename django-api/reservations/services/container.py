"""Wires services to the Django stores."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from reservations.conf import ReservationPolicy
from reservations.services.availability import AvailabilityCalculator
from reservations.services.catalog import CatalogService
from reservations.services.jobs import JobRunner
from reservations.services.offers import OfferLifecycleManager
from reservations.services.seat_holds import SeatHoldManager
from reservations.services.tickets import TicketLedger
from reservations.services.waiting_list import WaitingListQueue
from reservations.stores import (
    DjangoEventStore,
    DjangoJobScheduler,
    DjangoSeatHoldStore,
    DjangoSeatingPlanStore,
    DjangoSeatStore,
    DjangoTicketStore,
    DjangoUnitOfWork,
    DjangoWaitingListStore,
)


@dataclass(frozen=True)
class ReservationServices:
    availability: AvailabilityCalculator
    queue: WaitingListQueue
    offers: OfferLifecycleManager
    holds: SeatHoldManager
    ledger: TicketLedger
    catalog: CatalogService
    jobs: JobRunner


def build_services(
    clock: Callable[[], datetime] = timezone.now,
    policy: ReservationPolicy | None = None,
) -> ReservationServices:
    policy = policy or ReservationPolicy.from_settings()
    uow = DjangoUnitOfWork()
    events = DjangoEventStore()
    plans = DjangoSeatingPlanStore()
    seats = DjangoSeatStore()
    holds = DjangoSeatHoldStore()
    waiting_list = DjangoWaitingListStore()
    tickets = DjangoTicketStore()
    scheduler = DjangoJobScheduler()

    availability = AvailabilityCalculator(events, tickets, waiting_list, seats, clock)
    offers = OfferLifecycleManager(
        uow, events, waiting_list, tickets, scheduler, availability, policy, clock
    )
    hold_manager = SeatHoldManager(
        uow, events, plans, seats, holds, tickets, scheduler, policy, clock
    )
    return ReservationServices(
        availability=availability,
        queue=WaitingListQueue(uow, events, waiting_list, availability, offers, clock),
        offers=offers,
        holds=hold_manager,
        ledger=TicketLedger(uow, events, tickets, offers),
        catalog=CatalogService(
            uow, events, plans, seats, holds, waiting_list, tickets, availability, offers
        ),
        jobs=JobRunner(uow, scheduler, offers, hold_manager, policy, clock),
    )
