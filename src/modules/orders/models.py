"""Order, OrderItem, OrderStatusHistory and OrderItemMerge models.

Business rules implemented:
- Order number ``OC-NNNNNN`` drawn from an atomic sequence on first save.
- Order status and every line status are equal after each write: status
  changes go through ``Order.apply_status`` and the repository persists the
  cascade onto the lines.
- Moving an order back to pending/purchasing clears ``delivered_at``.
- Each status change generates a history record (see ``signals.py``).
- Customer and Product FKs use PROTECT to preserve order history.
- Lines keep a copy of brand/format/unit of measure/unit price taken from
  the product when the order was placed.
- ``idempotency_key`` makes API creation retry-safe.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel, Sequence
from modules.orders.constants import (
    OPEN_STATUSES,
    ORDER_NUMBER_SEQUENCE,
    OrderStatus,
    format_order_number,
)
from modules.products.models import UnitOfMeasure
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``order_number`` is a human-readable identifier assigned on first save.
    The UUIDv7 ``id`` is used for all internal references and API lookups.

    ``idempotency_key`` is nullable: only orders created via the public API
    with an ``Idempotency-Key`` header carry one.
    """

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    delivery_due = models.DateField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(max_length=1000, blank=True, default="")
    location = models.CharField(max_length=200, blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(
                fields=["customer", "status", "created_at"],
                name="orders_consolidation_idx",
            ),
            models.Index(fields=["delivery_due"], name="orders_delivery_due_idx"),
        ]

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def apply_status(self, new_status: str) -> str:
        """Set *new_status* on the order and on every loaded line.

        Reverting to pending or purchasing retracts the delivery mark.
        Returns the previous status.  The repository writes the line
        statuses when the order is saved.
        """
        previous = self.status
        self.status = new_status
        if new_status in OPEN_STATUSES:
            self.delivered_at = None
        if self.pk:
            for item in self.items.all():
                item.status = new_status
        return previous

    def days_since_creation(self, now: Optional[datetime] = None) -> int:
        """Whole days elapsed since creation (floored)."""
        now = now or timezone.now()
        return (now - self.created_at).days

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items.all()), Decimal("0"))

    @property
    def item_count(self) -> int:
        return len(self.items.all())

    @property
    def is_overdue(self) -> bool:
        if self.status != OrderStatus.INVOICED or self.delivered_at:
            return False
        if self.delivery_due is None:
            return False
        return self.delivery_due < timezone.localdate()

    @property
    def is_pending_delivery(self) -> bool:
        return self.status == OrderStatus.INVOICED and self.delivered_at is None

    @property
    def is_delivered(self) -> bool:
        return self.delivered_at is not None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            self.order_number = format_order_number(
                Sequence.next_value(ORDER_NUMBER_SEQUENCE)
            )
        super().save(*args, **kwargs)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Line of an order.

    ``unit_price``, ``brand``, ``format`` and ``unit_of_measure`` are
    copies taken from the product when the line was created, so later
    catalog edits do not rewrite order history.  ``status`` always mirrors
    the order status.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    position = models.PositiveSmallIntegerField(default=0)
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    unit_of_measure = models.CharField(
        max_length=10,
        choices=UnitOfMeasure.choices,
        default=UnitOfMeasure.UNIT,
    )
    brand = models.CharField(max_length=100, blank=True, default="")
    format = models.CharField(max_length=100, blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_items"
        ordering = ["position", "created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="order_items_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_price__gte=0),
                name="order_items_unit_price_non_negative",
            ),
        ]

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.unit_price

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} {self.unit_of_measure}"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    Each record captures a single status change with the responsible user
    and optional notes.  ``user`` is nullable: ``None`` means the change
    was performed by the system.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["order", "-created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order} : {self.old_status} -> {self.new_status}"


class OrderItemMerge(BaseModel):
    """Record of a quantity folded into an existing line by consolidation.

    Rows sharing an ``idempotency_key`` belong to one creation request and
    let a retried request return the original merge result instead of
    adding the quantities a second time.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="merges",
    )
    item = models.ForeignKey(
        "orders.OrderItem",
        on_delete=models.CASCADE,
        related_name="merges",
    )
    previous_quantity = models.DecimalField(max_digits=12, decimal_places=2)
    added_quantity = models.DecimalField(max_digits=12, decimal_places=2)
    idempotency_key = models.CharField(
        max_length=255, null=True, blank=True, db_index=True
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        db_table = "order_item_merges"
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.order} +{self.added_quantity} on {self.item_id}"


class OrderCreationRequest(BaseModel):
    """Outcome of an order creation request sent with an ``Idempotency-Key``.

    The row is created and locked before the consolidation candidates are
    read, so two requests sharing a key run one after the other and the
    second one replays ``result`` instead of merging again.  ``result`` is
    blank until the first request finishes.
    """

    idempotency_key = models.CharField(max_length=255, unique=True)
    result = models.CharField(max_length=10, blank=True, default="")
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="+",
    )
    merged = models.PositiveIntegerField(default=0)
    consolidated_orders = models.JSONField(default=list, blank=True)
    skipped_product_ids = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = "order_creation_requests"

    def __str__(self) -> str:
        return f"{self.idempotency_key} [{self.result or 'in progress'}]"
