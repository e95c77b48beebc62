"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the Order aggregate needs:
atomic creation with items, row locking, consolidation look-ups,
quantity merges and idempotent creation records.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import (
        Order,
        OrderCreationRequest,
        OrderItem,
        OrderItemMerge,
    )


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children, OrderStatusHistory
    records and OrderItemMerge records.  Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` must include ``customer_id`` and ``items`` (list of dicts
        with ``product_id``, ``quantity``, ``unit_price``,
        ``unit_of_measure``, ``brand``, ``format``, ``notes``).
        """

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Order]":
        """List orders with optional filters."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order holding a row-level lock."""

    @abstractmethod
    def find_open_since(self, customer_id: UUID, since: datetime) -> List[Order]:
        """Lock and return the customer's open orders created at or after *since*."""

    @abstractmethod
    def merge_quantity(
        self,
        item_id: UUID,
        quantity: Decimal,
        *,
        idempotency_key: Optional[str] = None,
        actor: Any = None,
    ) -> OrderItemMerge:
        """Add *quantity* to an existing line and record the merge."""

    @abstractmethod
    def replace_items(self, order: Order, items: List[Dict[str, Any]]) -> List[OrderItem]:
        """Delete every line of *order* and create *items* in their place."""

    @abstractmethod
    def claim_request(self, idempotency_key: str) -> OrderCreationRequest:
        """Return the locked creation record for *idempotency_key*, creating
        it when the key is new.

        A concurrent request with the same key waits here until the
        holder's transaction ends.
        """

    @abstractmethod
    def complete_request(
        self, request: OrderCreationRequest, **outcome: Any
    ) -> OrderCreationRequest:
        """Store the outcome fields of a finished creation request."""
