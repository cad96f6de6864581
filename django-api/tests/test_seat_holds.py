"""Tests for seat materialization, holds and confirmation."""

from decimal import Decimal

import pytest

from reservations import models
from reservations.domain import Money, SeatRef, SeatStatus, TicketStatus
from reservations.domain.errors import (
    EventNotSeatedError,
    HoldExpiredError,
    HoldIntegrityError,
    HoldNotFoundError,
    HoldOwnershipError,
    InvalidSeatSelectionError,
    SeatNotFoundError,
    SeatUnavailableError,
)

S1 = SeatRef("main", "A", "1")
S2 = SeatRef("main", "A", "2")


def _seat_status(event, ref: SeatRef) -> str:
    return models.Seat.objects.get(
        event=event, section_id=ref.section_id, row=ref.row, seat_number=ref.seat_number
    ).status


@pytest.mark.django_db
class TestMaterialize:
    def test_two_seat_plan_materializes_available_seats(self, services, make_seated_event):
        event = make_seated_event()

        seats = services.holds.seat_map(event.pk)

        [section] = seats.sections
        [row] = section.rows
        assert [s.ref for s in row.seats] == [S1, S2]
        assert all(s.status is SeatStatus.AVAILABLE for s in row.seats)
        assert all(s.price == Money(Decimal("100")) for s in row.seats)
        event.refresh_from_db()
        assert event.total_tickets == 2

    def test_row_pricing_overrides_section_price(self, services, make_seated_event, tiered_plan):
        event = make_seated_event(plan=tiered_plan)

        prices = {
            (s.section_id, s.row): s.price
            for s in models.Seat.objects.filter(event=event)
        }

        assert prices[("stalls", "A")] == Decimal("60")
        assert prices[("stalls", "B")] == Decimal("90")
        assert prices[("balcony", "C")] == Decimal("30")
        assert models.Seat.objects.filter(event=event).count() == 7


@pytest.mark.django_db
class TestHold:
    def test_hold_marks_seats_and_schedules_expiry(
        self, services, clock, policy, make_seated_event
    ):
        event = make_seated_event()

        hold = services.holds.hold(event.pk, "u1", [S1, S2])

        assert hold.seats == (S1, S2)
        assert hold.expires_at == clock() + policy.hold_window
        assert _seat_status(event, S1) == "held"
        assert _seat_status(event, S2) == "held"
        job = models.ScheduledJob.objects.get(kind="expire_hold")
        assert job.payload == {"hold_id": str(hold.id)}
        assert job.run_at == hold.expires_at

    def test_hold_is_all_or_nothing(self, services, make_seated_event):
        """Given S2 held by someone else, asking for S1 and S2 holds neither."""
        event = make_seated_event()
        services.holds.hold(event.pk, "other", [S2])

        with pytest.raises(SeatUnavailableError) as exc_info:
            services.holds.hold(event.pk, "u1", [S1, S2])

        assert exc_info.value.seats == [str(S2)]
        assert _seat_status(event, S1) == "available"
        assert models.SeatHold.objects.filter(user_id="u1").count() == 0

    def test_unknown_seat(self, services, make_seated_event):
        event = make_seated_event()
        with pytest.raises(SeatNotFoundError):
            services.holds.hold(event.pk, "u1", [SeatRef("main", "Z", "9")])

    def test_empty_selection(self, services, make_seated_event):
        event = make_seated_event()
        with pytest.raises(InvalidSeatSelectionError):
            services.holds.hold(event.pk, "u1", [])

    def test_repeated_seat(self, services, make_seated_event):
        event = make_seated_event()
        with pytest.raises(InvalidSeatSelectionError):
            services.holds.hold(event.pk, "u1", [S1, S1])

    def test_flat_event_has_no_seats(self, services, make_flat_event):
        event = make_flat_event()
        with pytest.raises(EventNotSeatedError):
            services.holds.hold(event.pk, "u1", [S1])


@pytest.mark.django_db
class TestConfirm:
    def test_confirm_sells_seats_and_issues_one_ticket_each(self, services, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1, S2])

        tickets = services.holds.confirm_seats(hold.id, "u1", payment_reference="pi_9")

        assert sorted(t.seat_ref for t in tickets) == [S1, S2]
        assert all(t.status is TicketStatus.VALID for t in tickets)
        assert all(t.amount == Money(Decimal("100")) for t in tickets)
        assert _seat_status(event, S1) == "sold"
        assert _seat_status(event, S2) == "sold"
        assert models.SeatHold.objects.get(pk=hold.id.value).confirmed
        availability = services.availability.compute(event.pk)
        assert availability.committed_count == 2
        assert availability.is_sold_out

    def test_confirm_twice_returns_same_tickets(self, services, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1])

        first = services.holds.confirm_seats(hold.id, "u1")
        second = services.holds.confirm_seats(hold.id, "u1")

        assert [t.id for t in second] == [t.id for t in first]
        assert models.Ticket.objects.filter(event=event).count() == 1

    def test_confirm_by_other_user(self, services, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1])

        with pytest.raises(HoldOwnershipError):
            services.holds.confirm_seats(hold.id, "u2")
        assert _seat_status(event, S1) == "held"

    def test_confirm_after_window(self, services, clock, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1])
        clock.advance(minutes=10)

        with pytest.raises(HoldExpiredError):
            services.holds.confirm_seats(hold.id, "u1")
        assert not models.Ticket.objects.exists()

    def test_confirm_with_a_seat_no_longer_held_issues_nothing(
        self, services, make_seated_event
    ):
        """Given one seat of the hold was freed underneath it, confirm aborts whole."""
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1, S2])
        models.Seat.objects.filter(event=event, seat_number="2").update(
            status="available", hold_expires_at=None
        )

        with pytest.raises(HoldIntegrityError):
            services.holds.confirm_seats(hold.id, "u1")

        assert not models.Ticket.objects.exists()
        assert _seat_status(event, S1) == "held"
        assert not models.SeatHold.objects.get(pk=hold.id.value).confirmed

    def test_confirm_unknown_hold(self, services, db):
        with pytest.raises(HoldNotFoundError):
            services.holds.confirm_seats("1d4b7f0e-8f53-4a8e-9a43-3b1e0ad0c111", "u1")


@pytest.mark.django_db
class TestReleaseAndExpiry:
    def test_release_frees_seats(self, services, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1, S2])

        assert services.holds.release_hold(hold.id, user_id="u1") is True

        assert _seat_status(event, S1) == "available"
        assert not models.SeatHold.objects.exists()

    def test_release_twice(self, services, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1])
        services.holds.release_hold(hold.id)

        with pytest.raises(HoldNotFoundError):
            services.holds.release_hold(hold.id)

    def test_release_by_other_user(self, services, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1])

        with pytest.raises(HoldOwnershipError):
            services.holds.release_hold(hold.id, user_id="u2")

    def test_release_of_confirmed_hold_keeps_seats_sold(self, services, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1])
        services.holds.confirm_seats(hold.id, "u1")

        assert services.holds.release_hold(hold.id) is False
        assert _seat_status(event, S1) == "sold"

    def test_expire_before_window_is_noop(self, services, clock, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1])
        clock.advance(minutes=5)

        assert services.holds.expire_hold(hold.id) is False
        assert _seat_status(event, S1) == "held"

    def test_expire_after_window_frees_seats_once(self, services, clock, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1])
        clock.advance(minutes=10)

        assert services.holds.expire_hold(hold.id) is True
        assert services.holds.expire_hold(hold.id) is False
        assert _seat_status(event, S1) == "available"

    def test_expire_after_confirm_is_noop(self, services, clock, make_seated_event):
        event = make_seated_event()
        hold = services.holds.hold(event.pk, "u1", [S1])
        services.holds.confirm_seats(hold.id, "u1")
        clock.advance(minutes=10)

        assert services.holds.expire_hold(hold.id) is False
        assert _seat_status(event, S1) == "sold"


@pytest.mark.django_db
class TestQueries:
    def test_active_hold(self, services, clock, make_seated_event):
        event = make_seated_event()
        assert services.holds.active_hold(event.pk, "u1") is None

        hold = services.holds.hold(event.pk, "u1", [S1])
        assert services.holds.active_hold(event.pk, "u1").id == hold.id

        clock.advance(minutes=10)
        assert services.holds.active_hold(event.pk, "u1") is None

    def test_seat_map_groups_in_plan_order_with_natural_labels(
        self, services, make_seated_event, tiered_plan
    ):
        event = make_seated_event(plan=tiered_plan)

        seat_map = services.holds.seat_map(event.pk)

        assert [s.id for s in seat_map.sections] == ["stalls", "balcony"]
        assert [s.name for s in seat_map.sections] == ["Stalls", "Balcony"]
        stalls = seat_map.sections[0]
        assert [r.row for r in stalls.rows] == ["A", "B"]
        assert [s.ref.seat_number for s in stalls.rows[0].seats] == ["1", "2", "10"]
        assert seat_map.min_price == Money(Decimal("30"))

    def test_seat_map_of_flat_event_is_empty(self, services, make_flat_event):
        event = make_flat_event()

        seat_map = services.holds.seat_map(event.pk)

        assert seat_map.sections == ()
        assert seat_map.min_price == Money(Decimal("50"))
