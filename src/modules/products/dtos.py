"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
- ``AdjustStockDTO``: input for the stock endpoint.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class UnitOfMeasureEnum(StrEnum):
    UNIT = "unidad"
    PAIR = "par"
    METER = "metro"
    BOX = "caja"
    KG = "kg"
    LITER = "litro"
    PACK = "pack"


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``sku`` is a non-empty string (normalised to upper case).
    - prices and stock levels are non-negative.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    sku: str = Field(max_length=50)
    name: str = Field(min_length=1, max_length=200)
    unit_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    cost_price: Decimal | None = Field(
        default=None, ge=0, max_digits=12, decimal_places=2
    )
    description: str = Field(default="", max_length=1000)
    brand: str = Field(default="", max_length=100)
    format: str = Field(default="", max_length=100)
    stock_current: Decimal = Field(default=Decimal("0"), ge=0)
    min_stock: Decimal = Field(default=Decimal("0"), ge=0)
    category: str = Field(default="", max_length=100)
    unit_of_measure: UnitOfMeasureEnum = UnitOfMeasureEnum.UNIT

    @field_validator("sku")
    @classmethod
    def sku_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("SKU must not be empty.")
        return v.strip().upper()


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional; only supplied fields will be updated.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    sku: str | None = Field(default=None, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    unit_price: Decimal | None = Field(default=None, ge=0)
    cost_price: Decimal | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=1000)
    brand: str | None = Field(default=None, max_length=100)
    format: str | None = Field(default=None, max_length=100)
    stock_current: Decimal | None = Field(default=None, ge=0)
    min_stock: Decimal | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, max_length=100)
    unit_of_measure: UnitOfMeasureEnum | None = None
    is_active: bool | None = None

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("SKU must not be empty.")
        return v.strip().upper()


class AdjustStockDTO(BaseModel):
    """``current`` and/or ``min_stock``; at least one is required."""

    model_config = ConfigDict(frozen=True)

    current: Decimal | None = Field(default=None, ge=0)
    min_stock: Decimal | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def at_least_one_value(self) -> Self:
        if self.current is None and self.min_stock is None:
            raise ValueError("Provide 'current' and/or 'min_stock'.")
        return self
