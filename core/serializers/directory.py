import bleach
from rest_framework import serializers

from core.models import Call


class DepartmentCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    contact = serializers.CharField(required=False, allow_blank=True, max_length=64)
    contacts = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    managerId = serializers.IntegerField(required=False, allow_null=True, min_value=1)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Department name is required')
        return v


class CallCreateSerializer(serializers.Serializer):
    userType = serializers.CharField(max_length=50, required=False, allow_blank=True)
    callTime = serializers.CharField(max_length=50, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=[c for c, _ in Call.STATUS_CHOICES], default='ongoing')
    callType = serializers.ChoiceField(choices=[c for c, _ in Call.TYPE_CHOICES], required=False)
    duration = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    callerId = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    receiverId = serializers.IntegerField(required=False, allow_null=True, min_value=1)
