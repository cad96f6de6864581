from reservations.services.availability import AvailabilityCalculator
from reservations.services.catalog import CatalogService
from reservations.services.container import ReservationServices, build_services
from reservations.services.jobs import JobRunner
from reservations.services.offers import OfferLifecycleManager
from reservations.services.seat_holds import SeatHoldManager
from reservations.services.tickets import TicketLedger
from reservations.services.waiting_list import WaitingListQueue

__all__ = [
    "AvailabilityCalculator",
    "CatalogService",
    "JobRunner",
    "OfferLifecycleManager",
    "ReservationServices",
    "SeatHoldManager",
    "TicketLedger",
    "WaitingListQueue",
    "build_services",
]
