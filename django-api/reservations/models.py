"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.db.models import Q
from django.utils import timezone


class SeatingPlan(models.Model):
    """Persistence model for reusable seating plan templates."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    owner_id = models.CharField(max_length=255, blank=True, default="")
    # List of {id, name, rows, seat_labels, price, category, row_pricing}.
    sections = models.JSONField(default=list)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner_id"], name="plan_owner_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    starts_at = models.DateTimeField(null=True, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_tickets = models.PositiveIntegerField(default=0)
    seating_plan = models.ForeignKey(
        SeatingPlan,
        on_delete=models.PROTECT,
        related_name="events",
        null=True,
        blank=True,
    )
    organizer_id = models.CharField(max_length=255, blank=True, default="")
    is_cancelled = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="event_created_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class Seat(models.Model):
    """Persistence model for seats materialized from a plan."""

    class Status(models.TextChoices):
        AVAILABLE = "available"
        HELD = "held"
        SOLD = "sold"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="seats")
    section_id = models.CharField(max_length=100)
    row = models.CharField(max_length=20)
    seat_number = models.CharField(max_length=20)
    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.AVAILABLE
    )
    hold_expires_at = models.DateTimeField(null=True, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    category = models.CharField(max_length=16, blank=True, default="")

    class Meta:
        ordering = ["section_id", "row", "seat_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "section_id", "row", "seat_number"],
                name="unique_seat_per_event",
            ),
        ]
        indexes = [
            models.Index(fields=["event", "status"], name="seat_event_status_idx"),
            models.Index(fields=["event", "section_id"], name="seat_event_section_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.section_id}/{self.row}{self.seat_number} ({self.status})"


class WaitingListEntry(models.Model):
    """Persistence model for waiting list entries."""

    class Status(models.TextChoices):
        WAITING = "waiting"
        OFFERED = "offered"
        PURCHASED = "purchased"
        EXPIRED = "expired"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="waiting_list"
    )
    user_id = models.CharField(max_length=255)
    status = models.CharField(max_length=16, choices=Status.choices)
    offer_expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user_id"],
                condition=~Q(status="expired"),
                name="one_active_entry_per_user",
            ),
        ]
        indexes = [
            models.Index(
                fields=["event", "status", "created_at"], name="entry_event_status_idx"
            ),
            models.Index(fields=["user_id", "event"], name="entry_user_event_idx"),
        ]
        verbose_name_plural = "waiting list entries"

    def __str__(self) -> str:
        return f"{self.user_id} - {self.status}"


class SeatHold(models.Model):
    """Persistence model for provisional seat claims."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="holds")
    user_id = models.CharField(max_length=255)
    # List of {section_id, row, seat_number}, fixed at creation.
    seats = models.JSONField(default=list)
    expires_at = models.DateTimeField()
    confirmed = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["user_id", "event"], name="hold_user_event_idx"),
            models.Index(fields=["event", "expires_at"], name="hold_event_expires_idx"),
        ]

    def __str__(self) -> str:
        return f"Hold {self.id} by {self.user_id}"


class Ticket(models.Model):
    """Persistence model for issued tickets."""

    class Status(models.TextChoices):
        VALID = "valid"
        USED = "used"
        REFUNDED = "refunded"
        CANCELLED = "cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")
    user_id = models.CharField(max_length=255)
    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.VALID
    )
    purchased_at = models.DateTimeField(default=timezone.now)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_reference = models.CharField(max_length=255, blank=True, default="")
    section_id = models.CharField(max_length=100, null=True, blank=True)
    row = models.CharField(max_length=20, null=True, blank=True)
    seat_number = models.CharField(max_length=20, null=True, blank=True)

    class Meta:
        ordering = ["purchased_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "section_id", "row", "seat_number"],
                condition=Q(section_id__isnull=False, status__in=["valid", "used"]),
                name="one_live_ticket_per_seat",
            ),
        ]
        indexes = [
            models.Index(fields=["event", "status"], name="ticket_event_status_idx"),
            models.Index(fields=["user_id"], name="ticket_user_idx"),
            models.Index(fields=["user_id", "event"], name="ticket_user_event_idx"),
            models.Index(fields=["payment_reference"], name="ticket_payment_ref_idx"),
        ]

    def __str__(self) -> str:
        return f"Ticket {self.id} ({self.status})"


class ScheduledJob(models.Model):
    """Durable deferred callback; survives process restarts."""

    class Status(models.TextChoices):
        PENDING = "pending"
        DONE = "done"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kind = models.CharField(max_length=32)
    payload = models.JSONField(default=dict)
    run_at = models.DateTimeField()
    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.PENDING
    )
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["run_at"]
        indexes = [
            models.Index(fields=["status", "run_at"], name="job_status_run_at_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.kind} @ {self.run_at}"
