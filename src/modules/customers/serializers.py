"""Customer DRF serializers for API output.

Input is validated by the Pydantic DTOs in ``dtos.py``; this module only
renders the Customer resource.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.customers.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    """Read serializer for the Customer resource."""

    created_by = serializers.CharField(
        source="created_by.username", read_only=True, default=None
    )

    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "tax_id",
            "email",
            "phone",
            "street",
            "city",
            "region",
            "postal_code",
            "notes",
            "is_active",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
