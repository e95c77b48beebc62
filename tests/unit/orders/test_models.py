"""Unit tests for the Order aggregate."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from modules.orders.constants import OrderStatus, format_order_number
from modules.orders.models import Order, OrderItem

pytestmark = pytest.mark.unit


class TestOrderNumber:
    def test_format(self):
        assert format_order_number(7) == "OC-000007"

    def test_numbers_are_assigned_in_sequence(self, make_order, other_customer):
        first = make_order()
        second = make_order(for_customer=other_customer)

        assert first.order_number == "OC-000001"
        assert second.order_number == "OC-000002"

    def test_number_is_kept_on_resave(self, make_order):
        order = make_order()
        number = order.order_number
        order.notes = "changed"
        order.save()
        order.refresh_from_db()
        assert order.order_number == number


class TestApplyStatus:
    def test_returns_previous_and_cascades_to_lines(self, make_order):
        order = Order.objects.prefetch_related("items").get(id=make_order().id)

        previous = order.apply_status(OrderStatus.PURCHASING)

        assert previous == OrderStatus.PENDING
        assert order.status == OrderStatus.PURCHASING
        assert {item.status for item in order.items.all()} == {OrderStatus.PURCHASING}

    def test_reopening_clears_delivery(self):
        order = Order(status=OrderStatus.INVOICED, delivered_at=timezone.now())
        order.apply_status(OrderStatus.PENDING)
        assert order.delivered_at is None

    def test_nullifying_keeps_delivery(self):
        delivered_at = timezone.now()
        order = Order(status=OrderStatus.INVOICED, delivered_at=delivered_at)
        order.apply_status(OrderStatus.NULLIFIED)
        assert order.delivered_at == delivered_at


class TestDerivedProperties:
    def test_total_and_item_count(self, make_order, hammer, screws):
        order = make_order(
            items=[
                {"product_id": hammer.id, "quantity": "2"},
                {"product_id": screws.id, "quantity": "3", "unit_price": "1000"},
            ]
        )

        assert order.item_count == 2
        assert order.total == Decimal("2") * hammer.unit_price + Decimal("3000")

    def test_line_subtotal(self):
        line = OrderItem(quantity=Decimal("2.5"), unit_price=Decimal("100"))
        assert line.subtotal == Decimal("250")

    def test_overdue_when_invoiced_past_due_and_undelivered(self):
        order = Order(
            status=OrderStatus.INVOICED,
            delivery_due=timezone.localdate() - timedelta(days=1),
        )
        assert order.is_overdue is True
        assert order.is_pending_delivery is True

    @pytest.mark.parametrize(
        "status, delivered, days",
        [
            (OrderStatus.PENDING, False, -1),
            (OrderStatus.INVOICED, True, -1),
            (OrderStatus.INVOICED, False, 0),
            (OrderStatus.INVOICED, False, 3),
        ],
    )
    def test_not_overdue(self, status, delivered, days):
        order = Order(
            status=status,
            delivered_at=timezone.now() if delivered else None,
            delivery_due=timezone.localdate() + timedelta(days=days),
        )
        assert order.is_overdue is False

    def test_no_due_date_is_never_overdue(self):
        assert Order(status=OrderStatus.INVOICED).is_overdue is False

    def test_days_since_creation_is_floored(self):
        now = timezone.now()
        order = Order(created_at=now - timedelta(days=6, hours=23, minutes=59))
        assert order.days_since_creation(now) == 6
