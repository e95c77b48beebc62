"""Unit tests for automatic status history tracking."""

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderStatusHistory

pytestmark = pytest.mark.unit


class TestStatusHistorySignals:
    def test_initial_record_on_create(self, customer, vendedor):
        order = Order.objects.create(customer=customer, created_by=vendedor)

        history = OrderStatusHistory.objects.get(order=order)
        assert history.old_status is None
        assert history.new_status == OrderStatus.PENDING
        assert history.user == vendedor
        assert history.notes == "Order created"

    def test_record_on_status_change(self, customer, vendedor, facturador):
        order = Order.objects.create(customer=customer, created_by=vendedor)
        order.status = OrderStatus.INVOICED
        order.updated_by = facturador
        order.save()

        history = OrderStatusHistory.objects.get(
            order=order, new_status=OrderStatus.INVOICED
        )
        assert history.old_status == OrderStatus.PENDING
        assert history.user == facturador
        assert history.notes == ""

    def test_notes_left_by_service_are_used_once(self, customer, vendedor):
        order = Order.objects.create(customer=customer, created_by=vendedor)
        order.status = OrderStatus.NULLIFIED
        order._status_change_notes = "Nullified"
        order.save()
        order.status = OrderStatus.PENDING
        order.save()

        history = OrderStatusHistory.objects.filter(order=order)
        assert history.get(new_status=OrderStatus.NULLIFIED).notes == "Nullified"
        assert history.get(old_status=OrderStatus.NULLIFIED).notes == ""

    def test_no_record_without_status_change(self, customer, vendedor):
        order = Order.objects.create(customer=customer, created_by=vendedor)
        order.notes = "just a note"
        order.save()

        assert OrderStatusHistory.objects.filter(order=order).count() == 1
