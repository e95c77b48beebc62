"""Order DRF serializers for API output.

Request payloads are validated by the Pydantic DTOs in ``dtos.py``;
these serializers only render orders.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order lines with product snapshot."""

    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_sku",
            "quantity",
            "unit_price",
            "subtotal",
            "unit_of_measure",
            "brand",
            "format",
            "status",
            "notes",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    user = serializers.CharField(source="user.username", default=None, read_only=True)

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "user",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class CustomerSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True, allow_null=True)


class OrderListSerializer(serializers.ModelSerializer):
    """Order with its lines and delivery flags (no history)."""

    customer = CustomerSummarySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)
    is_pending_delivery = serializers.BooleanField(read_only=True)
    is_delivered = serializers.BooleanField(read_only=True)
    created_by = serializers.CharField(
        source="created_by.username", default=None, read_only=True
    )
    updated_by = serializers.CharField(
        source="updated_by.username", default=None, read_only=True
    )

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer",
            "status",
            "delivery_due",
            "delivered_at",
            "notes",
            "location",
            "items",
            "total",
            "item_count",
            "is_overdue",
            "is_pending_delivery",
            "is_delivered",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderSerializer(OrderListSerializer):
    """Detail serializer: adds the status history."""

    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + ["status_history"]
        read_only_fields = fields
