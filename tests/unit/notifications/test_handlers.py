"""Unit tests for the order notification handlers."""

from uuid import uuid4

import pytest

from modules.notifications.handlers import (
    OrderCreatedNotificationHandler,
    OrderDeliveredNotificationHandler,
    OrderStatusChangedNotificationHandler,
)
from modules.orders.events import OrderCreated, OrderDelivered, OrderStatusChanged

pytestmark = pytest.mark.unit


class _RecordingService:
    def __init__(self):
        self.calls = []

    def notify_order_created(self, order):
        self.calls.append(("created", order.id))

    def notify_status_changed(self, order, old_status, new_status):
        self.calls.append(("status", order.id, old_status, new_status))

    def notify_delivered(self, order):
        self.calls.append(("delivered", order.id))


@pytest.fixture()
def recorder():
    return _RecordingService()


class TestNotificationHandlers:
    def test_created(self, recorder, make_order):
        order = make_order()
        OrderCreatedNotificationHandler(lambda: recorder).handle(
            OrderCreated(aggregate_id=order.id)
        )
        assert recorder.calls == [("created", order.id)]

    def test_status_changed_passes_statuses(self, recorder, make_order):
        order = make_order()
        OrderStatusChangedNotificationHandler(lambda: recorder).handle(
            OrderStatusChanged(
                aggregate_id=order.id, old_status="pendiente", new_status="compra"
            )
        )
        assert recorder.calls == [("status", order.id, "pendiente", "compra")]

    def test_delivered(self, recorder, make_order):
        order = make_order()
        OrderDeliveredNotificationHandler(lambda: recorder).handle(
            OrderDelivered(aggregate_id=order.id)
        )
        assert recorder.calls == [("delivered", order.id)]

    def test_missing_order_is_skipped(self, recorder):
        OrderCreatedNotificationHandler(lambda: recorder).handle(
            OrderCreated(aggregate_id=uuid4())
        )
        assert recorder.calls == []
