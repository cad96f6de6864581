from django.urls import path

from reservations.handlers import (
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

urlpatterns = [
    path(
        "events/<str:event_id>/availability",
        EventAvailabilityView.as_view(),
        name="event-availability",
    ),
    path(
        "events/<str:event_id>/waiting-list",
        WaitingListView.as_view(),
        name="waiting-list-join",
    ),
    path(
        "events/<str:event_id>/waiting-list/position",
        QueuePositionView.as_view(),
        name="waiting-list-position",
    ),
    path(
        "events/<str:event_id>/waiting-list/<str:entry_id>/release",
        OfferReleaseView.as_view(),
        name="offer-release",
    ),
    path(
        "events/<str:event_id>/waiting-list/<str:entry_id>/purchase",
        OfferPurchaseView.as_view(),
        name="offer-purchase",
    ),
    path("events/<str:event_id>/seats", SeatMapView.as_view(), name="seat-map"),
    path("events/<str:event_id>/holds", HoldListView.as_view(), name="hold-create"),
    path(
        "events/<str:event_id>/holds/active",
        ActiveHoldView.as_view(),
        name="hold-active",
    ),
    path(
        "events/<str:event_id>/tickets/mine",
        MyEventTicketsView.as_view(),
        name="event-tickets-mine",
    ),
    path("holds/<str:hold_id>", HoldDetailView.as_view(), name="hold-detail"),
    path("holds/<str:hold_id>/confirm", HoldConfirmView.as_view(), name="hold-confirm"),
    path("me/tickets", MyTicketsView.as_view(), name="my-tickets"),
    path("me/waiting-list", MyWaitingListView.as_view(), name="my-waiting-list"),
]
