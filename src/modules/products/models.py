"""Product model with SKU uniqueness and stock control.

Business rules implemented:
- SKU is unique and normalised to upper case.
- Inactive products cannot be ordered (enforced at service layer).
- Prices and stock levels are never negative.
- Products are never hard-deleted: ``is_active=False`` retires them.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class UnitOfMeasure(models.TextChoices):
    UNIT = "unidad", "Unidad"
    PAIR = "par", "Par"
    METER = "metro", "Metro"
    BOX = "caja", "Caja"
    KG = "kg", "Kilogramo"
    LITER = "litro", "Litro"
    PACK = "pack", "Pack"


class Product(BaseModel):
    """Product aggregate root.

    ``sku`` is normalised to uppercase on save to prevent visual duplicates
    (e.g. "sku-01" vs "SKU-01").  Brand, format and unit of measure are
    copied onto order lines when an order is placed.
    """

    sku = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(max_length=1000, blank=True, default="")
    brand = models.CharField(max_length=100, blank=True, default="")
    format = models.CharField(max_length=100, blank=True, default="")
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    stock_current = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    min_stock = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    category = models.CharField(max_length=100, blank=True, default="")
    unit_of_measure = models.CharField(
        max_length=10,
        choices=UnitOfMeasure.choices,
        default=UnitOfMeasure.UNIT,
    )
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active"], name="products_active_idx"),
            models.Index(fields=["category"], name="products_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(unit_price__gte=0),
                name="products_unit_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_current__gte=0) & models.Q(min_stock__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    @property
    def is_low_stock(self) -> bool:
        return self.stock_current <= self.min_stock

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip().upper()
        for field in ("unit_price", "cost_price", "stock_current", "min_stock"):
            value = getattr(self, field)
            if value is not None and value < 0:
                raise ValidationError({field: "Value cannot be negative."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
