"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations are wrapped in ``transaction.atomic()`` to ensure
the Order aggregate (Order + OrderItems) is persisted atomically.

Concurrency control uses ``select_for_update()``: status changes lock the
order row, and consolidation locks every candidate order so that two
concurrent creations for one customer apply their merges one after the
other.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Prefetch

from modules.core.outbox import record_events
from modules.orders.constants import OPEN_STATUSES
from modules.orders.models import (
    Order,
    OrderCreationRequest,
    OrderItem,
    OrderItemMerge,
)
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

_ITEMS = Prefetch("items", queryset=OrderItem.objects.select_related("product"))


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` keys:
        - ``customer_id``, ``items`` (required)
        - ``delivery_due``, ``notes``, ``location``, ``created_by``,
          ``idempotency_key`` (optional)
        """
        order = Order(
            customer_id=data["customer_id"],
            delivery_due=data.get("delivery_due"),
            notes=data.get("notes", ""),
            location=data.get("location", ""),
            created_by=data.get("created_by"),
            idempotency_key=data.get("idempotency_key"),
        )
        order.save()
        self._create_items(order, data["items"])

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(data["items"]),
        )
        return order

    def _create_items(self, order: Order, items: List[Dict[str, Any]]) -> List[OrderItem]:
        return OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    position=position,
                    status=order.status,
                    **item_data,
                )
                for position, item_data in enumerate(items)
            ]
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _base_queryset(self):
        return Order.objects.select_related(
            "customer", "created_by", "updated_by"
        ).prefetch_related(_ITEMS, "status_history__user")

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Uses ``select_related`` for the FKs (single JOIN) and
        ``prefetch_related`` for items, items→product, and status
        history (separate batched queries).  Prevents N+1.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return self._base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None):
        """List orders with optional filters and eager-loaded relations."""
        queryset = Order.objects.select_related(
            "customer", "created_by", "updated_by"
        ).prefetch_related(_ITEMS)
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Eager-loads items so the caller can cascade a status change while
        the row is locked.  Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_for_update(of=("self",))
                .select_related("customer")
                .prefetch_related(_ITEMS)
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def find_open_since(self, customer_id: UUID, since: datetime) -> List[Order]:
        return list(
            Order.objects.select_for_update()
            .filter(
                customer_id=customer_id,
                status__in=OPEN_STATUSES,
                created_at__gte=since,
            )
            .prefetch_related(_ITEMS)
            .order_by("created_at")
        )

    def claim_request(self, idempotency_key: str) -> OrderCreationRequest:
        """Lock the creation record for *idempotency_key* (SELECT FOR UPDATE).

        A second request racing on the insert hits the unique constraint;
        ``get_or_create`` then re-reads the committed row under the lock.
        """
        request, created = OrderCreationRequest.objects.select_for_update().get_or_create(
            idempotency_key=idempotency_key
        )
        if not created:
            logger.info(
                "order.idempotency_key_reused",
                idempotency_key=idempotency_key,
                result=request.result,
            )
        return request

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order, cascade its status to the lines and store
        pending domain events in the outbox."""
        entity.save()
        synced = (
            OrderItem.objects.filter(order=entity)
            .exclude(status=entity.status)
            .update(status=entity.status)
        )
        events = record_events(entity, topic="orders")
        logger.info(
            "order.saved",
            order_id=str(entity.id),
            lines_synced=synced,
            event_count=len(events),
        )
        return entity

    @transaction.atomic
    def merge_quantity(
        self,
        item_id: UUID,
        quantity: Decimal,
        *,
        idempotency_key: Optional[str] = None,
        actor: Any = None,
    ) -> OrderItemMerge:
        item = OrderItem.objects.select_for_update().get(id=item_id)
        previous = item.quantity
        OrderItem.objects.filter(id=item_id).update(quantity=F("quantity") + quantity)
        return OrderItemMerge.objects.create(
            order_id=item.order_id,
            item=item,
            previous_quantity=previous,
            added_quantity=quantity,
            idempotency_key=idempotency_key,
            created_by=actor,
        )

    @transaction.atomic
    def replace_items(self, order: Order, items: List[Dict[str, Any]]) -> List[OrderItem]:
        OrderItem.objects.filter(order=order).delete()
        created = self._create_items(order, items)
        logger.info("order.items_replaced", order_id=str(order.id), item_count=len(created))
        return created

    def complete_request(
        self, request: OrderCreationRequest, **outcome: Any
    ) -> OrderCreationRequest:
        for field, value in outcome.items():
            setattr(request, field, value)
        request.save()
        return request
