"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when a new order is persisted."""

    order_number: str = ""
    customer_id: str = ""
    created_by_id: Optional[int] = None


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order moves to a different status."""

    order_number: str = ""
    old_status: str = ""
    new_status: str = ""
    changed_by_id: Optional[int] = None


@dataclass(frozen=True)
class OrderDelivered(DomainEvent):
    """Raised when an invoiced order is marked as delivered."""

    order_number: str = ""
    delivered_by_id: Optional[int] = None


@dataclass(frozen=True)
class OrderItemsMerged(DomainEvent):
    """Raised when a creation request was folded into this open order."""

    order_number: str = ""
    merged_lines: int = 0
