"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
Input DTOs are immutable (``frozen=True``).

- ``OrderItemInputDTO``: a single order line in a request.
- ``CreateOrderDTO``: input for order creation (nested items).
- ``UpdateOrderDTO``: partial update; only supplied fields change.
- ``ReplaceOrderDTO``: full replacement (administrators).
- ``ChangeStatusDTO``: input for the status endpoint.
- ``CreateOrderResult``: outcome of a creation request (created or merged).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.orders.constants import MAX_ORDER_ITEMS
from modules.products.dtos import UnitOfMeasureEnum

if TYPE_CHECKING:
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class OrderItemInputDTO(BaseModel):
    """Immutable DTO for a single order line.

    ``unit_price``, ``unit_of_measure``, ``brand`` and ``format`` are
    optional: missing values are copied from the product.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    product_id: UUID
    quantity: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    unit_price: Optional[Decimal] = Field(
        default=None, ge=0, max_digits=12, decimal_places=2
    )
    unit_of_measure: Optional[UnitOfMeasureEnum] = None
    brand: Optional[str] = Field(default=None, max_length=100)
    format: Optional[str] = Field(default=None, max_length=100)
    notes: str = Field(default="", max_length=500)


Items = List[OrderItemInputDTO]


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` holds between 1 and ``MAX_ORDER_ITEMS`` lines.
    - Each quantity is strictly positive.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    customer_id: UUID
    items: Items = Field(min_length=1, max_length=MAX_ORDER_ITEMS)
    delivery_due: date
    notes: str = Field(default="", max_length=1000)
    location: str = Field(default="", max_length=200)
    idempotency_key: Optional[str] = Field(default=None, max_length=255)

    @field_validator("idempotency_key")
    @classmethod
    def blank_key_as_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class ReplaceOrderDTO(BaseModel):
    """Full replacement of an order; ``status`` is optional."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    customer_id: UUID
    items: Items = Field(min_length=1, max_length=MAX_ORDER_ITEMS)
    delivery_due: Optional[date] = None
    notes: str = Field(default="", max_length=1000)
    location: str = Field(default="", max_length=200)
    status: Optional[str] = None


class UpdateOrderDTO(BaseModel):
    """Partial update.  Only fields present in the request are applied.

    ``status`` is kept as plain text so that unknown values surface as
    ``InvalidOrderStatus`` from the service.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    status: Optional[str] = None
    customer_id: Optional[UUID] = None
    items: Optional[Items] = Field(
        default=None, min_length=1, max_length=MAX_ORDER_ITEMS
    )
    delivery_due: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    location: Optional[str] = Field(default=None, max_length=200)


class ChangeStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    status: str


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateOrderResult:
    """Outcome of ``OrderService.create_order``.

    ``result`` is ``"created"`` (``order`` is the new order) or
    ``"merged"`` (the request was folded into ``consolidated_orders``).
    ``replayed`` is set when the idempotency key had already been used.
    """

    result: Literal["created", "merged"]
    order: Optional["Order"] = None
    merged: int = 0
    consolidated_orders: List[str] = field(default_factory=list)
    skipped_product_ids: List[UUID] = field(default_factory=list)
    replayed: bool = False

    @property
    def created(self) -> bool:
        return self.result == "created"
