from rest_framework import serializers


class RoomCreateSerializer(serializers.Serializer):
    roomNumber = serializers.CharField(max_length=20)

    def validate_roomNumber(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Room number is required')
        return v


class RoomAssignSerializer(serializers.Serializer):
    customerId = serializers.IntegerField(min_value=1)
    roomNumber = serializers.CharField(max_length=20)


class RoomUnassignSerializer(serializers.Serializer):
    customerId = serializers.IntegerField(min_value=1)
