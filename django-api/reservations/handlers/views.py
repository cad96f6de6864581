"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from reservations.domain.errors import (
    CapacityExceededError,
    ConflictError,
    DomainError,
    InvalidIdError,
    InvalidSeatSelectionError,
    InvalidStateError,
    NotFoundError,
)
from reservations.handlers.serializers import (
    AvailabilitySerializer,
    ConfirmRequestSerializer,
    HoldRequestSerializer,
    PurchaseRequestSerializer,
    QueuePositionSerializer,
    SeatHoldSerializer,
    SeatMapSerializer,
    TicketSerializer,
    WaitingListEntrySerializer,
)
from reservations.services import build_services

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (InvalidIdError, status.HTTP_400_BAD_REQUEST),
    (InvalidSeatSelectionError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (CapacityExceededError, status.HTTP_422_UNPROCESSABLE_ENTITY),
)


def error_response(error: DomainError) -> Response:
    """Translate a domain error into a user-safe response."""
    http_status = next(
        (code for kind, code in _STATUS_BY_ERROR if isinstance(error, kind)),
        status.HTTP_400_BAD_REQUEST,
    )
    logger.info(
        "api.domain_error",
        extra={"code": error.code.value, "http_status": http_status},
    )
    return Response(
        {"error": {"code": error.code.value, "message": error.message}},
        status=http_status,
    )


class ReservationView(APIView):
    """Base view that maps domain errors raised by services."""

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            return error_response(exc)
        return super().handle_exception(exc)

    @property
    def services(self):
        return build_services()


class EventAvailabilityView(ReservationView):
    """Handler for GET /api/events/{event_id}/availability"""

    def get(self, request: Request, event_id: str) -> Response:
        availability = self.services.availability.compute(event_id)
        return Response(AvailabilitySerializer(availability).data)


class WaitingListView(ReservationView):
    """Handler for POST /api/events/{event_id}/waiting-list"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str) -> Response:
        entry = self.services.queue.join(event_id, request.user.user_id)
        return Response(
            WaitingListEntrySerializer(entry).data, status=status.HTTP_201_CREATED
        )


class QueuePositionView(ReservationView):
    """Handler for GET /api/events/{event_id}/waiting-list/position"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, event_id: str) -> Response:
        position = self.services.queue.position(event_id, request.user.user_id)
        if position is None:
            return Response({"entry": None, "position": None})
        return Response(QueuePositionSerializer(position).data)


class OfferReleaseView(ReservationView):
    """Handler for POST /api/events/{event_id}/waiting-list/{entry_id}/release"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str, entry_id: str) -> Response:
        released = self.services.offers.release(
            entry_id, event_id, user_id=request.user.user_id
        )
        return Response({"released": released})


class OfferPurchaseView(ReservationView):
    """Handler for POST /api/events/{event_id}/waiting-list/{entry_id}/purchase"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str, entry_id: str) -> Response:
        payload = PurchaseRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        ticket = self.services.offers.purchase(
            entry_id, event_id, request.user.user_id, payload.to_payment()
        )
        return Response(TicketSerializer(ticket).data, status=status.HTTP_201_CREATED)


class SeatMapView(ReservationView):
    """Handler for GET /api/events/{event_id}/seats"""

    def get(self, request: Request, event_id: str) -> Response:
        seat_map = self.services.holds.seat_map(event_id)
        return Response(SeatMapSerializer(seat_map).data)


class HoldListView(ReservationView):
    """Handler for POST /api/events/{event_id}/holds"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str) -> Response:
        payload = HoldRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        hold = self.services.holds.hold(
            event_id, request.user.user_id, payload.validated_data["seats"]
        )
        return Response(SeatHoldSerializer(hold).data, status=status.HTTP_201_CREATED)


class ActiveHoldView(ReservationView):
    """Handler for GET /api/events/{event_id}/holds/active"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, event_id: str) -> Response:
        hold = self.services.holds.active_hold(event_id, request.user.user_id)
        return Response(SeatHoldSerializer(hold).data if hold else None)


class HoldDetailView(ReservationView):
    """Handler for DELETE /api/holds/{hold_id}"""

    permission_classes = [IsAuthenticated]

    def delete(self, request: Request, hold_id: str) -> Response:
        self.services.holds.release_hold(hold_id, user_id=request.user.user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class HoldConfirmView(ReservationView):
    """Handler for POST /api/holds/{hold_id}/confirm"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, hold_id: str) -> Response:
        payload = ConfirmRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        tickets = self.services.holds.confirm_seats(
            hold_id,
            request.user.user_id,
            payment_reference=payload.validated_data["external_reference"],
        )
        return Response(TicketSerializer(tickets, many=True).data)


class MyTicketsView(ReservationView):
    """Handler for GET /api/me/tickets"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        tickets = self.services.ledger.tickets_for_user(request.user.user_id)
        return Response(TicketSerializer(tickets, many=True).data)


class MyWaitingListView(ReservationView):
    """Handler for GET /api/me/waiting-list"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        entries = self.services.queue.entries_for_user(request.user.user_id)
        return Response(WaitingListEntrySerializer(entries, many=True).data)


class MyEventTicketsView(ReservationView):
    """Handler for GET /api/events/{event_id}/tickets/mine"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, event_id: str) -> Response:
        ledger = self.services.ledger
        tickets = ledger.tickets_for_user_event(request.user.user_id, event_id)
        return Response(
            {
                "has_ticket": ledger.has_ticket(request.user.user_id, event_id),
                "tickets": TicketSerializer(tickets, many=True).data,
            }
        )
