"""Order event handlers that send e-mail notifications.

Subscribed on the in-process bus in ``NotificationsConfig.ready``; they
run when the outbox is drained, after the order transaction committed.
"""

from __future__ import annotations

from typing import Callable, Optional
from uuid import UUID

import structlog

from modules.notifications.services import NotificationService
from modules.orders.events import OrderCreated, OrderDelivered, OrderStatusChanged
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class _OrderNotificationHandler:
    def __init__(
        self, service_factory: Callable[[], NotificationService] = NotificationService
    ) -> None:
        self._service_factory = service_factory

    def _load(self, order_id: UUID) -> Optional[Order]:
        order = OrderDjangoRepository().get_by_id(str(order_id))
        if order is None:
            logger.warning("notification.order_missing", order_id=str(order_id))
        return order


class OrderCreatedNotificationHandler(
    _OrderNotificationHandler, IEventHandler[OrderCreated]
):
    def handle(self, event: OrderCreated) -> None:
        order = self._load(event.aggregate_id)
        if order is not None:
            self._service_factory().notify_order_created(order)


class OrderStatusChangedNotificationHandler(
    _OrderNotificationHandler, IEventHandler[OrderStatusChanged]
):
    def handle(self, event: OrderStatusChanged) -> None:
        order = self._load(event.aggregate_id)
        if order is not None:
            self._service_factory().notify_status_changed(
                order, event.old_status, event.new_status
            )


class OrderDeliveredNotificationHandler(
    _OrderNotificationHandler, IEventHandler[OrderDelivered]
):
    def handle(self, event: OrderDelivered) -> None:
        order = self._load(event.aggregate_id)
        if order is not None:
            self._service_factory().notify_delivered(order)


order_created_notification = OrderCreatedNotificationHandler()
order_status_changed_notification = OrderStatusChangedNotificationHandler()
order_delivered_notification = OrderDeliveredNotificationHandler()
