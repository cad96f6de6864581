from reservations.handlers.views import (
    ActiveHoldView,
    EventAvailabilityView,
    HoldConfirmView,
    HoldDetailView,
    HoldListView,
    MyEventTicketsView,
    MyTicketsView,
    MyWaitingListView,
    OfferPurchaseView,
    OfferReleaseView,
    QueuePositionView,
    SeatMapView,
    WaitingListView,
)

__all__ = [
    "ActiveHoldView",
    "EventAvailabilityView",
    "HoldConfirmView",
    "HoldDetailView",
    "HoldListView",
    "MyEventTicketsView",
    "MyTicketsView",
    "MyWaitingListView",
    "OfferPurchaseView",
    "OfferReleaseView",
    "QueuePositionView",
    "SeatMapView",
    "WaitingListView",
]
