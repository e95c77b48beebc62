"""User DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.accounts.models import Role, User


class UserSerializer(serializers.ModelSerializer):
    """Read serializer; the password hash is never exposed."""

    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "display_name",
            "role",
            "is_active",
            "date_joined",
        ]
        read_only_fields = fields


class CreateUserSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    first_name = serializers.CharField(required=False, default="", allow_blank=True)
    last_name = serializers.CharField(required=False, default="", allow_blank=True)
    role = serializers.ChoiceField(choices=Role.choices, default=Role.VENDEDOR)


class UpdateUserSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    first_name = serializers.CharField(required=False, allow_blank=True)
    last_name = serializers.CharField(required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    is_active = serializers.BooleanField(required=False)


class ResetPasswordSerializer(serializers.Serializer):
    new_password = serializers.CharField(min_length=6, required=False, write_only=True)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(min_length=6, write_only=True)
