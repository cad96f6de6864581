import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SeatingPlan",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("owner_id", models.CharField(blank=True, default="", max_length=255)),
                ("sections", models.JSONField(default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["owner_id"], name="plan_owner_idx")],
            },
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                ("starts_at", models.DateTimeField(blank=True, null=True)),
                ("price", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("total_tickets", models.PositiveIntegerField(default=0)),
                ("organizer_id", models.CharField(blank=True, default="", max_length=255)),
                ("is_cancelled", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "seating_plan",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="events",
                        to="reservations.seatingplan",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["-created_at"], name="event_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="Seat",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("section_id", models.CharField(max_length=100)),
                ("row", models.CharField(max_length=20)),
                ("seat_number", models.CharField(max_length=20)),
                (
                    "status",
                    models.CharField(
                        choices=[("available", "Available"), ("held", "Held"), ("sold", "Sold")],
                        default="available",
                        max_length=16,
                    ),
                ),
                ("hold_expires_at", models.DateTimeField(blank=True, null=True)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("category", models.CharField(blank=True, default="", max_length=16)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="seats",
                        to="reservations.event",
                    ),
                ),
            ],
            options={
                "ordering": ["section_id", "row", "seat_number"],
                "indexes": [
                    models.Index(fields=["event", "status"], name="seat_event_status_idx"),
                    models.Index(fields=["event", "section_id"], name="seat_event_section_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "section_id", "row", "seat_number"),
                        name="unique_seat_per_event",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="WaitingListEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.CharField(max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("waiting", "Waiting"),
                            ("offered", "Offered"),
                            ("purchased", "Purchased"),
                            ("expired", "Expired"),
                        ],
                        max_length=16,
                    ),
                ),
                ("offer_expires_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="waiting_list",
                        to="reservations.event",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "waiting list entries",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["event", "status", "created_at"], name="entry_event_status_idx"),
                    models.Index(fields=["user_id", "event"], name="entry_user_event_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "expired"), _negated=True),
                        fields=("event", "user_id"),
                        name="one_active_entry_per_user",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="SeatHold",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.CharField(max_length=255)),
                ("seats", models.JSONField(default=list)),
                ("expires_at", models.DateTimeField()),
                ("confirmed", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="holds",
                        to="reservations.event",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["user_id", "event"], name="hold_user_event_idx"),
                    models.Index(fields=["event", "expires_at"], name="hold_event_expires_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.CharField(max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("valid", "Valid"),
                            ("used", "Used"),
                            ("refunded", "Refunded"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="valid",
                        max_length=16,
                    ),
                ),
                ("purchased_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("payment_reference", models.CharField(blank=True, default="", max_length=255)),
                ("section_id", models.CharField(blank=True, max_length=100, null=True)),
                ("row", models.CharField(blank=True, max_length=20, null=True)),
                ("seat_number", models.CharField(blank=True, max_length=20, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tickets",
                        to="reservations.event",
                    ),
                ),
            ],
            options={
                "ordering": ["purchased_at"],
                "indexes": [
                    models.Index(fields=["event", "status"], name="ticket_event_status_idx"),
                    models.Index(fields=["user_id"], name="ticket_user_idx"),
                    models.Index(fields=["user_id", "event"], name="ticket_user_event_idx"),
                    models.Index(fields=["payment_reference"], name="ticket_payment_ref_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("section_id__isnull", False), ("status__in", ["valid", "used"])),
                        fields=("event", "section_id", "row", "seat_number"),
                        name="one_live_ticket_per_seat",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="ScheduledJob",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("kind", models.CharField(max_length=32)),
                ("payload", models.JSONField(default=dict)),
                ("run_at", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("done", "Done")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("attempts", models.PositiveIntegerField(default=0)),
                ("last_error", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["run_at"],
                "indexes": [models.Index(fields=["status", "run_at"], name="job_status_run_at_idx")],
            },
        ),
    ]
