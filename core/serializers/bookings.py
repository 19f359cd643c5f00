import bleach
from rest_framework import serializers

from core.models import Booking


class BookingCreateSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1)
    departmentId = serializers.IntegerField(min_value=1)
    timeSlot = serializers.CharField(max_length=50)
    bookingType = serializers.ChoiceField(choices=[c for c, _ in Booking.TYPE_CHOICES])
    date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Booking.STATUS_CHOICES])


class BookingListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Booking.STATUS_CHOICES], required=False)
