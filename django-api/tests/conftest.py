"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from reservations import models
from reservations.conf import ReservationPolicy
from reservations.domain import Money, RowPricing, Section
from reservations.services import build_services

START = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Frozen clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def policy() -> ReservationPolicy:
    return ReservationPolicy(
        offer_window=timedelta(minutes=15),
        hold_window=timedelta(minutes=10),
        job_batch_size=50,
        job_retry_delay=timedelta(seconds=30),
    )


@pytest.fixture
def services(clock, policy):
    return build_services(clock=clock, policy=policy)


@pytest.fixture
def make_flat_event(db):
    def make(total_tickets: int = 1, **kwargs) -> models.Event:
        return models.Event.objects.create(
            name=kwargs.pop("name", "Flat gig"),
            price=kwargs.pop("price", Decimal("50.00")),
            total_tickets=total_tickets,
            **kwargs,
        )

    return make


@pytest.fixture
def two_seat_plan(db, services):
    """One section, row A, seats 1 and 2 at 100."""
    return services.catalog.create_seating_plan(
        "Small room",
        [
            Section(
                id="main",
                name="Main",
                rows=("A",),
                seat_labels=("1", "2"),
                price=Money(Decimal("100")),
            )
        ],
    )


@pytest.fixture
def make_seated_event(db, services, two_seat_plan):
    def make(plan=None, materialize: bool = True, **kwargs) -> models.Event:
        plan = plan or two_seat_plan
        event = models.Event.objects.create(
            name=kwargs.pop("name", "Seated show"),
            price=kwargs.pop("price", Decimal("80.00")),
            seating_plan_id=plan.id.value,
            **kwargs,
        )
        if materialize:
            services.catalog.materialize_seats(event.pk)
        return event

    return make


@pytest.fixture
def tiered_plan(db, services):
    """Two sections; row B of the stalls is repriced as premium."""
    return services.catalog.create_seating_plan(
        "Tiered hall",
        [
            Section(
                id="stalls",
                name="Stalls",
                rows=("A", "B"),
                seat_labels=("1", "2", "10"),
                price=Money(Decimal("60")),
                row_pricing=(RowPricing(row="B", price=Money(Decimal("90"))),),
            ),
            Section(
                id="balcony",
                name="Balcony",
                rows=("C",),
                seat_labels=("1",),
                price=Money(Decimal("30")),
            ),
        ],
    )
