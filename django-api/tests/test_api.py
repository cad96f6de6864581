"""Integration tests for the reservations HTTP API."""

import pytest
from rest_framework.test import APIClient

from reservations import models

UNKNOWN_ID = "1d4b7f0e-8f53-4a8e-9a43-3b1e0ad0c111"


def as_user(client: APIClient, user_id: str) -> APIClient:
    client.credentials(HTTP_X_USER_ID=user_id)
    return client


@pytest.mark.django_db
class TestAvailability:
    """Tests for GET /api/events/{id}/availability"""

    def test_availability_of_flat_event(self, api_client: APIClient, make_flat_event):
        """Given an unsold event, every ticket remains."""
        event = make_flat_event(total_tickets=5)

        response = api_client.get(f"/api/events/{event.pk}/availability")

        assert response.status_code == 200
        assert response.json() == {
            "is_sold_out": False,
            "total_capacity": 5,
            "committed_count": 0,
            "pending_count": 0,
            "remaining": 5,
            "min_price": "50.00",
        }

    def test_availability_not_found(self, api_client: APIClient, db):
        """Given event does not exist, returns 404."""
        response = api_client.get(f"/api/events/{UNKNOWN_ID}/availability")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "EVENT_NOT_FOUND"

    def test_availability_invalid_id_format(self, api_client: APIClient, db):
        """Given invalid UUID, returns 400."""
        response = api_client.get("/api/events/not-a-uuid/availability")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ID"


@pytest.mark.django_db
class TestWaitingList:
    """Tests for POST /api/events/{id}/waiting-list and its position"""

    def test_join_requires_user(self, api_client: APIClient, make_flat_event):
        """Given no user header, returns 401."""
        event = make_flat_event()

        response = api_client.post(f"/api/events/{event.pk}/waiting-list")

        assert response.status_code == 401

    def test_join_then_position(self, api_client: APIClient, make_flat_event):
        """Given one free ticket, the first caller is offered and the second waits."""
        event = make_flat_event(total_tickets=1)

        first = as_user(api_client, "u1").post(f"/api/events/{event.pk}/waiting-list")
        second = as_user(api_client, "u2").post(f"/api/events/{event.pk}/waiting-list")
        position = api_client.get(f"/api/events/{event.pk}/waiting-list/position")

        assert first.status_code == 201
        assert first.json()["status"] == "offered"
        assert first.json()["offer_expires_at"] is not None
        assert second.json()["status"] == "waiting"
        assert position.json()["position"] == 2
        assert position.json()["entry"]["id"] == second.json()["id"]

    def test_position_without_entry(self, api_client: APIClient, make_flat_event):
        event = make_flat_event()

        response = as_user(api_client, "u1").get(
            f"/api/events/{event.pk}/waiting-list/position"
        )

        assert response.json() == {"entry": None, "position": None}

    def test_duplicate_join(self, api_client: APIClient, make_flat_event):
        """Given an active entry, a second join returns 409."""
        event = make_flat_event()
        client = as_user(api_client, "u1")
        client.post(f"/api/events/{event.pk}/waiting-list")

        response = client.post(f"/api/events/{event.pk}/waiting-list")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE_ENTRY"

    def test_my_waiting_list(self, api_client: APIClient, make_flat_event):
        event = make_flat_event()
        client = as_user(api_client, "u1")
        client.post(f"/api/events/{event.pk}/waiting-list")

        response = client.get("/api/me/waiting-list")

        assert [e["event_id"] for e in response.json()] == [str(event.pk)]


@pytest.mark.django_db
class TestOffers:
    """Tests for release and purchase of an offer"""

    def test_purchase_offer(self, api_client: APIClient, make_flat_event):
        """Given a live offer, purchase issues a valid ticket."""
        event = make_flat_event(total_tickets=1)
        client = as_user(api_client, "u1")
        entry = client.post(f"/api/events/{event.pk}/waiting-list").json()

        response = client.post(
            f"/api/events/{event.pk}/waiting-list/{entry['id']}/purchase",
            {"amount": "50.00", "external_reference": "pi_1"},
            format="json",
        )

        assert response.status_code == 201
        assert response.json()["status"] == "valid"
        assert response.json()["amount"] == "50.00"
        assert response.json()["seat_ref"] is None
        mine = client.get(f"/api/events/{event.pk}/tickets/mine").json()
        assert mine["has_ticket"] is True
        assert len(client.get("/api/me/tickets").json()) == 1

    def test_refunded_ticket_is_listed_but_not_held(
        self, api_client: APIClient, services, make_flat_event
    ):
        """Given the only ticket was refunded, has_ticket is false."""
        event = make_flat_event(total_tickets=1)
        client = as_user(api_client, "u1")
        entry = client.post(f"/api/events/{event.pk}/waiting-list").json()
        ticket = client.post(
            f"/api/events/{event.pk}/waiting-list/{entry['id']}/purchase",
            {"amount": "50.00"},
            format="json",
        ).json()
        services.ledger.refund(ticket["id"])

        mine = client.get(f"/api/events/{event.pk}/tickets/mine").json()

        assert mine["has_ticket"] is False
        assert [t["status"] for t in mine["tickets"]] == ["refunded"]

    def test_purchase_requires_amount(self, api_client: APIClient, make_flat_event):
        event = make_flat_event(total_tickets=1)
        client = as_user(api_client, "u1")
        entry = client.post(f"/api/events/{event.pk}/waiting-list").json()

        response = client.post(
            f"/api/events/{event.pk}/waiting-list/{entry['id']}/purchase", {}, format="json"
        )

        assert response.status_code == 400

    def test_purchase_someone_elses_offer(self, api_client: APIClient, make_flat_event):
        """Given another user's offer, returns 409."""
        event = make_flat_event(total_tickets=1)
        entry = as_user(api_client, "u1").post(f"/api/events/{event.pk}/waiting-list").json()

        response = as_user(api_client, "u2").post(
            f"/api/events/{event.pk}/waiting-list/{entry['id']}/purchase",
            {"amount": "50.00"},
            format="json",
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_OFFER_STATE"

    def test_release_offer_promotes_next(self, api_client: APIClient, make_flat_event):
        event = make_flat_event(total_tickets=1)
        entry = as_user(api_client, "u1").post(f"/api/events/{event.pk}/waiting-list").json()
        as_user(api_client, "u2").post(f"/api/events/{event.pk}/waiting-list")

        response = as_user(api_client, "u1").post(
            f"/api/events/{event.pk}/waiting-list/{entry['id']}/release"
        )

        assert response.json() == {"released": True}
        assert models.WaitingListEntry.objects.get(user_id="u2").status == "offered"


@pytest.mark.django_db
class TestSeatHolds:
    """Tests for seat map, holds and confirmation"""

    SEATS = [
        {"section_id": "main", "row": "A", "seat_number": "1"},
        {"section_id": "main", "row": "A", "seat_number": "2"},
    ]

    def test_seat_map(self, api_client: APIClient, make_seated_event):
        event = make_seated_event()

        response = api_client.get(f"/api/events/{event.pk}/seats")

        body = response.json()
        assert body["min_price"] == "100.00"
        [section] = body["sections"]
        assert section["name"] == "Main"
        assert [s["seat_number"] for s in section["rows"][0]["seats"]] == ["1", "2"]

    def test_hold_and_confirm(self, api_client: APIClient, make_seated_event):
        event = make_seated_event()
        client = as_user(api_client, "u1")

        hold = client.post(f"/api/events/{event.pk}/holds", {"seats": self.SEATS}, format="json")
        active = client.get(f"/api/events/{event.pk}/holds/active")
        confirm = client.post(
            f"/api/holds/{hold.json()['id']}/confirm",
            {"external_reference": "pi_2"},
            format="json",
        )

        assert hold.status_code == 201
        assert active.json()["id"] == hold.json()["id"]
        assert confirm.status_code == 200
        assert sorted(t["seat_ref"]["seat_number"] for t in confirm.json()) == ["1", "2"]
        availability = api_client.get(f"/api/events/{event.pk}/availability").json()
        assert availability["is_sold_out"] is True

    def test_hold_taken_seat(self, api_client: APIClient, make_seated_event):
        """Given a seat held by another user, returns 409 and holds nothing."""
        event = make_seated_event()
        as_user(api_client, "u1").post(
            f"/api/events/{event.pk}/holds", {"seats": self.SEATS[1:]}, format="json"
        )

        response = as_user(api_client, "u2").post(
            f"/api/events/{event.pk}/holds", {"seats": self.SEATS}, format="json"
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SEAT_UNAVAILABLE"
        assert models.SeatHold.objects.count() == 1

    def test_hold_with_no_seats(self, api_client: APIClient, make_seated_event):
        event = make_seated_event()

        response = as_user(api_client, "u1").post(
            f"/api/events/{event.pk}/holds", {"seats": []}, format="json"
        )

        assert response.status_code == 400

    def test_release_hold(self, api_client: APIClient, make_seated_event):
        event = make_seated_event()
        client = as_user(api_client, "u1")
        hold = client.post(f"/api/events/{event.pk}/holds", {"seats": self.SEATS}, format="json")

        response = client.delete(f"/api/holds/{hold.json()['id']}")

        assert response.status_code == 204
        assert not models.SeatHold.objects.exists()

    def test_release_unknown_hold(self, api_client: APIClient, db):
        """Given hold does not exist, returns 404."""
        response = as_user(api_client, "u1").delete(f"/api/holds/{UNKNOWN_ID}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "HOLD_NOT_FOUND"

    def test_join_seated_event(self, api_client: APIClient, make_seated_event):
        """Given a seated event, the waiting list is closed."""
        event = make_seated_event()

        response = as_user(api_client, "u1").post(f"/api/events/{event.pk}/waiting-list")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SEATED_EVENT"
