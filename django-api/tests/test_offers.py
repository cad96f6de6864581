"""Tests for the Offer Lifecycle Manager."""

import random
from decimal import Decimal

import pytest

from reservations import models
from reservations.domain import EntryStatus, Money, PaymentFact, TicketStatus
from reservations.domain.errors import (
    EntryNotFoundError,
    EventCancelledError,
    InvalidOfferStateError,
    OfferExpiredError,
)

PAYMENT = PaymentFact(amount=Money(Decimal("50.00")), external_reference="pi_123")


def _status(entry) -> str:
    return models.WaitingListEntry.objects.get(pk=entry.id.value).status


@pytest.mark.django_db
class TestSingleTicketScenario:
    """One ticket, two users: expiry hands the offer to the next in line."""

    def test_expired_offer_cascades_and_purchase_sells_out(
        self, services, clock, make_flat_event
    ):
        event = make_flat_event(total_tickets=1)

        u1 = services.queue.join(event.pk, "u1")
        assert u1.status is EntryStatus.OFFERED

        u2 = services.queue.join(event.pk, "u2")
        assert u2.status is EntryStatus.WAITING
        # u1's live offer still occupies the slot ahead of u2.
        assert services.queue.position(event.pk, "u2").position == 2

        clock.advance(minutes=15)
        assert services.offers.expire(u1.id, event.pk) is True

        assert _status(u1) == "expired"
        assert _status(u2) == "offered"

        ticket = services.offers.purchase(u2.id, event.pk, "u2", PAYMENT)

        assert ticket.status is TicketStatus.VALID
        assert ticket.amount == Money(Decimal("50.00"))
        assert ticket.payment_reference == "pi_123"
        assert ticket.seat_ref is None
        assert _status(u2) == "purchased"
        availability = services.availability.compute(event.pk)
        assert availability.remaining == 0
        assert availability.is_sold_out


@pytest.mark.django_db
class TestPromote:
    def test_promotion_is_fifo(self, services, make_flat_event):
        """Given A then B waiting and one slot freeing, A is promoted."""
        event = make_flat_event(total_tickets=1)
        holder = services.queue.join(event.pk, "holder")
        a = services.queue.join(event.pk, "a")
        b = services.queue.join(event.pk, "b")

        services.offers.release(holder.id, event.pk)

        assert _status(a) == "offered"
        assert _status(b) == "waiting"

    def test_promote_fills_every_free_slot(self, services, make_flat_event):
        event = make_flat_event(total_tickets=0)
        entries = [services.queue.join(event.pk, f"u{i}") for i in range(4)]
        models.Event.objects.filter(pk=event.pk).update(total_tickets=3)

        promoted = services.offers.promote(event.pk)

        assert [p.id for p in promoted] == [e.id for e in entries[:3]]
        assert _status(entries[3]) == "waiting"
        assert models.ScheduledJob.objects.filter(kind="expire_offer").count() == 3

    def test_promote_is_noop_when_full(self, services, make_flat_event):
        event = make_flat_event(total_tickets=1)
        services.queue.join(event.pk, "u1")
        services.queue.join(event.pk, "u2")

        assert services.offers.promote(event.pk) == []


@pytest.mark.django_db
class TestExpire:
    def test_expire_twice_is_idempotent(self, services, make_flat_event):
        event = make_flat_event(total_tickets=1)
        u1 = services.queue.join(event.pk, "u1")
        u2 = services.queue.join(event.pk, "u2")
        u3 = services.queue.join(event.pk, "u3")

        assert services.offers.expire(u1.id, event.pk) is True
        assert services.offers.expire(u1.id, event.pk) is False

        assert _status(u1) == "expired"
        assert _status(u2) == "offered"
        assert _status(u3) == "waiting"

    def test_expire_after_purchase_is_noop(self, services, make_flat_event):
        event = make_flat_event(total_tickets=1)
        u1 = services.queue.join(event.pk, "u1")
        services.offers.purchase(u1.id, event.pk, "u1", PAYMENT)

        assert services.offers.expire(u1.id, event.pk) is False
        assert _status(u1) == "purchased"

    def test_expire_missing_entry_is_noop(self, services, make_flat_event):
        event = make_flat_event()
        assert services.offers.expire("1d4b7f0e-8f53-4a8e-9a43-3b1e0ad0c111", event.pk) is False


@pytest.mark.django_db
class TestRelease:
    def test_release_frees_the_slot(self, services, make_flat_event):
        event = make_flat_event(total_tickets=1)
        u1 = services.queue.join(event.pk, "u1")

        assert services.offers.release(u1.id, event.pk, user_id="u1") is True
        assert _status(u1) == "expired"
        assert services.availability.compute(event.pk).remaining == 1

    def test_release_of_waiting_entry_is_noop(self, services, make_flat_event):
        event = make_flat_event(total_tickets=0)
        u1 = services.queue.join(event.pk, "u1")

        assert services.offers.release(u1.id, event.pk) is False
        assert _status(u1) == "waiting"

    def test_release_by_other_user_is_rejected(self, services, make_flat_event):
        event = make_flat_event(total_tickets=1)
        u1 = services.queue.join(event.pk, "u1")

        with pytest.raises(InvalidOfferStateError):
            services.offers.release(u1.id, event.pk, user_id="intruder")

    def test_release_unknown_entry(self, services, make_flat_event):
        event = make_flat_event()
        with pytest.raises(EntryNotFoundError):
            services.offers.release("1d4b7f0e-8f53-4a8e-9a43-3b1e0ad0c111", event.pk)


@pytest.mark.django_db
class TestPurchase:
    def test_waiting_entry_cannot_purchase(self, services, make_flat_event):
        event = make_flat_event(total_tickets=0)
        u1 = services.queue.join(event.pk, "u1")

        with pytest.raises(InvalidOfferStateError):
            services.offers.purchase(u1.id, event.pk, "u1", PAYMENT)

    def test_other_user_cannot_purchase(self, services, make_flat_event):
        event = make_flat_event(total_tickets=1)
        u1 = services.queue.join(event.pk, "u1")

        with pytest.raises(InvalidOfferStateError):
            services.offers.purchase(u1.id, event.pk, "u2", PAYMENT)
        assert _status(u1) == "offered"

    def test_cancelled_event_cannot_purchase(self, services, make_flat_event):
        event = make_flat_event(total_tickets=1)
        u1 = services.queue.join(event.pk, "u1")
        models.Event.objects.filter(pk=event.pk).update(is_cancelled=True)

        with pytest.raises(EventCancelledError):
            services.offers.purchase(u1.id, event.pk, "u1", PAYMENT)
        assert not models.Ticket.objects.exists()

    def test_offer_past_its_window_cannot_purchase(self, services, clock, make_flat_event):
        """Given the timer has not fired yet, a stale offer still cannot buy."""
        event = make_flat_event(total_tickets=1)
        u1 = services.queue.join(event.pk, "u1")
        clock.advance(minutes=15, seconds=1)

        with pytest.raises(OfferExpiredError):
            services.offers.purchase(u1.id, event.pk, "u1", PAYMENT)

    def test_unknown_entry(self, services, make_flat_event):
        event = make_flat_event()
        with pytest.raises(EntryNotFoundError):
            services.offers.purchase(
                "1d4b7f0e-8f53-4a8e-9a43-3b1e0ad0c111", event.pk, "u1", PAYMENT
            )

    def test_purchase_does_not_promote(self, services, make_flat_event):
        event = make_flat_event(total_tickets=1)
        u1 = services.queue.join(event.pk, "u1")
        u2 = services.queue.join(event.pk, "u2")

        services.offers.purchase(u1.id, event.pk, "u1", PAYMENT)

        assert _status(u2) == "waiting"


@pytest.mark.django_db
class TestNoOversell:
    def test_random_operations_never_exceed_capacity(self, services, clock, make_flat_event):
        """committed + pending never exceeds total_tickets."""
        rng = random.Random(7)
        event = make_flat_event(total_tickets=3)
        users = [f"u{i}" for i in range(8)]

        for _ in range(60):
            user = rng.choice(users)
            action = rng.choice(["join", "purchase", "release", "tick"])
            active = services.queue.position(event.pk, user)
            if action == "join" and active is None:
                services.queue.join(event.pk, user)
            elif action == "purchase" and active and active.entry.status is EntryStatus.OFFERED:
                try:
                    services.offers.purchase(active.entry.id, event.pk, user, PAYMENT)
                except OfferExpiredError:
                    pass
            elif action == "release" and active:
                services.offers.release(active.entry.id, event.pk, user_id=user)
            elif action == "tick":
                clock.advance(minutes=8)
                services.jobs.run_due()

            availability = services.availability.compute(event.pk)
            assert (
                availability.committed_count + availability.pending_count
                <= availability.total_capacity
            )
        assert models.Ticket.objects.filter(event=event).count() <= 3
