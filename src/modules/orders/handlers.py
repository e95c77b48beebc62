"""Audit-log handlers for Orders domain events.

E-mail notifications subscribe separately, from ``modules.notifications``.
"""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCreated,
    OrderDelivered,
    OrderItemsMerged,
    OrderStatusChanged,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
            customer_id=event.customer_id,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
            old_status=event.old_status,
            new_status=event.new_status,
        )


class OrderDeliveredHandler(IEventHandler[OrderDelivered]):
    def handle(self, event: OrderDelivered) -> None:
        logger.info(
            "order.event.delivered",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
        )


class OrderItemsMergedHandler(IEventHandler[OrderItemsMerged]):
    def handle(self, event: OrderItemsMerged) -> None:
        logger.info(
            "order.event.items_merged",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
            merged_lines=event.merged_lines,
        )


order_created_handler = OrderCreatedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_delivered_handler = OrderDeliveredHandler()
order_items_merged_handler = OrderItemsMergedHandler()
