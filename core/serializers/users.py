import bleach
from rest_framework import serializers

from core.models import User


class UserCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    email = serializers.EmailField()
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    role = serializers.ChoiceField(choices=[c for c, _ in User.ROLE_CHOICES], default=User.ROLE_CUSTOMER)
    status = serializers.ChoiceField(choices=[c for c, _ in User.STATUS_CHOICES], default=User.STATUS_ACTIVE)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True)

    def validate_name(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class UserStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in User.STATUS_CHOICES])


class UserRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[c for c, _ in User.ROLE_CHOICES])


class UserListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(max_length=64, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=[c for c, _ in User.ROLE_CHOICES], required=False)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)
