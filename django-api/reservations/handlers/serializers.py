"""Serializers for transforming domain models to API responses."""

from decimal import Decimal

from rest_framework import serializers

from reservations.domain import Money, PaymentFact, SeatRef


class ValueField(serializers.Field):
    """Renders identifiers, enums and money by their plain value."""

    def to_representation(self, value):
        if isinstance(value, Money):
            return str(value)
        if hasattr(value, "value") and not isinstance(value, (str, int)):
            return str(value.value)
        return value


class SeatRefSerializer(serializers.Serializer):
    """Seat coordinates, used for both input and output."""

    section_id = serializers.CharField(max_length=100)
    row = serializers.CharField(max_length=20)
    seat_number = serializers.CharField(max_length=20)

    def to_internal_value(self, data) -> SeatRef:
        return SeatRef.from_dict(super().to_internal_value(data))


class AvailabilitySerializer(serializers.Serializer):
    is_sold_out = serializers.BooleanField()
    total_capacity = serializers.IntegerField()
    committed_count = serializers.IntegerField()
    pending_count = serializers.IntegerField()
    remaining = serializers.IntegerField()
    min_price = ValueField()


class WaitingListEntrySerializer(serializers.Serializer):
    id = ValueField()
    event_id = ValueField()
    user_id = serializers.CharField()
    status = ValueField()
    created_at = serializers.DateTimeField()
    offer_expires_at = serializers.DateTimeField()


class QueuePositionSerializer(serializers.Serializer):
    entry = WaitingListEntrySerializer()
    position = serializers.IntegerField()


class TicketSerializer(serializers.Serializer):
    id = ValueField()
    event_id = ValueField()
    user_id = serializers.CharField()
    status = ValueField()
    purchased_at = serializers.DateTimeField()
    amount = ValueField()
    seat_ref = SeatRefSerializer()


class SeatHoldSerializer(serializers.Serializer):
    id = ValueField()
    event_id = ValueField()
    user_id = serializers.CharField()
    seats = SeatRefSerializer(many=True)
    expires_at = serializers.DateTimeField()
    confirmed = serializers.BooleanField()


class SeatSerializer(serializers.Serializer):
    seat_number = serializers.CharField(source="ref.seat_number")
    status = ValueField()
    price = ValueField()
    category = ValueField()


class SeatMapRowSerializer(serializers.Serializer):
    row = serializers.CharField()
    seats = SeatSerializer(many=True)


class SeatMapSectionSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    rows = SeatMapRowSerializer(many=True)


class SeatMapSerializer(serializers.Serializer):
    sections = SeatMapSectionSerializer(many=True)
    min_price = ValueField()


class PurchaseRequestSerializer(serializers.Serializer):
    """Payment fact reported by the payment collaborator."""

    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0")
    )
    external_reference = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )

    def to_payment(self) -> PaymentFact:
        return PaymentFact(
            amount=Money(self.validated_data["amount"]),
            external_reference=self.validated_data["external_reference"],
        )


class HoldRequestSerializer(serializers.Serializer):
    seats = SeatRefSerializer(many=True, allow_empty=False)


class ConfirmRequestSerializer(serializers.Serializer):
    external_reference = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
