from django.contrib import admin, messages

from reservations.domain.errors import DomainError
from reservations.models import (
    Event,
    ScheduledJob,
    Seat,
    SeatHold,
    SeatingPlan,
    Ticket,
    WaitingListEntry,
)
from reservations.services import build_services


class WaitingListInline(admin.TabularInline):
    model = WaitingListEntry
    extra = 0
    readonly_fields = ["user_id", "status", "offer_expires_at", "created_at"]
    can_delete = False


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "total_tickets", "seating_plan", "is_cancelled", "created_at"]
    list_filter = ["is_cancelled"]
    search_fields = ["name", "location"]
    readonly_fields = ["is_cancelled"]
    inlines = [WaitingListInline]
    actions = ["materialize_seats", "cancel_events"]

    def _run(self, request, queryset, operation, done: str) -> None:
        catalog = build_services().catalog
        for event in queryset:
            try:
                getattr(catalog, operation)(event.pk)
            except DomainError as exc:
                self.message_user(request, f"{event}: {exc.message}", messages.ERROR)
            else:
                self.message_user(request, f"{event}: {done}", messages.SUCCESS)

    @admin.action(description="Materialize seats from seating plan")
    def materialize_seats(self, request, queryset):
        self._run(request, queryset, "materialize_seats", "seats materialized")

    @admin.action(description="Cancel selected events")
    def cancel_events(self, request, queryset):
        self._run(request, queryset, "cancel_event", "cancelled")


@admin.register(SeatingPlan)
class SeatingPlanAdmin(admin.ModelAdmin):
    list_display = ["name", "owner_id", "created_at"]
    search_fields = ["name", "owner_id"]


@admin.register(Seat)
class SeatAdmin(admin.ModelAdmin):
    list_display = ["event", "section_id", "row", "seat_number", "status", "price"]
    list_filter = ["status", "event"]
    readonly_fields = ["status", "hold_expires_at"]


@admin.register(WaitingListEntry)
class WaitingListEntryAdmin(admin.ModelAdmin):
    list_display = ["event", "user_id", "status", "offer_expires_at", "created_at"]
    list_filter = ["status", "event"]
    search_fields = ["user_id"]


@admin.register(SeatHold)
class SeatHoldAdmin(admin.ModelAdmin):
    list_display = ["event", "user_id", "expires_at", "confirmed"]
    list_filter = ["confirmed", "event"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["event", "user_id", "status", "amount", "purchased_at"]
    list_filter = ["status", "event"]
    search_fields = ["user_id", "payment_reference"]


@admin.register(ScheduledJob)
class ScheduledJobAdmin(admin.ModelAdmin):
    list_display = ["kind", "run_at", "status", "attempts"]
    list_filter = ["kind", "status"]
