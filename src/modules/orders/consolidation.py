"""Duplicate detection for order consolidation.

A creation request for a customer who already has an open order placed
within the consolidation window does not create a new order: each
incoming line whose product appears on an open line of such an order is
added to that line's quantity instead.

This module is pure (no ORM writes); ``OrderService`` applies the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, List, Sequence, Set
from uuid import UUID

from modules.orders.constants import OPEN_STATUSES

if TYPE_CHECKING:
    from modules.orders.dtos import OrderItemInputDTO
    from modules.orders.models import Order


@dataclass(frozen=True)
class DuplicateLine:
    """An incoming line matched against an existing open line."""

    order_id: UUID
    order_number: str
    item_id: UUID
    product_id: UUID
    quantity: Decimal


def window_start(now: datetime, hours: int) -> datetime:
    return now - timedelta(hours=hours)


def find_duplicates(
    items: Sequence[OrderItemInputDTO],
    candidates: Iterable[Order],
) -> List[DuplicateLine]:
    """Match incoming lines against the open lines of candidate orders.

    Every candidate order contributes at most one match per incoming line
    (its first open line for that product).  An incoming line may match
    several candidate orders; each of them receives the full quantity.
    """
    candidates = list(candidates)
    matches: List[DuplicateLine] = []
    for incoming in items:
        for order in candidates:
            if order.status not in OPEN_STATUSES:
                continue
            for line in order.items.all():
                if line.product_id == incoming.product_id and line.status in OPEN_STATUSES:
                    matches.append(
                        DuplicateLine(
                            order_id=order.id,
                            order_number=order.order_number,
                            item_id=line.id,
                            product_id=line.product_id,
                            quantity=incoming.quantity,
                        )
                    )
                    break
    return matches


def unmatched_products(
    items: Sequence[OrderItemInputDTO], matches: Iterable[DuplicateLine]
) -> List[UUID]:
    """Product ids of incoming lines that found no open line to merge into."""
    matched: Set[UUID] = {m.product_id for m in matches}
    return [item.product_id for item in items if item.product_id not in matched]
