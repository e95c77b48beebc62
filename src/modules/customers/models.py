"""Customer model with RUT validation and soft delete.

Business rules implemented:
- Tax id (Chilean RUT) is optional but unique when present.
- Inactive customers cannot place orders (enforced at service layer).
- Customers are never hard-deleted: ``is_active=False`` retires them.
- The tax id is masked in ``__str__`` (and therefore in logs).
"""

from __future__ import annotations

import re

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import BaseModel

RUT_PATTERN = re.compile(r"^\d+[-‐][0-9kK]$|^\d{1,2}\.\d{3}\.\d{3}[-‐][0-9kK]$")


def normalize_tax_id(value: str | None) -> str | None:
    """Trim and upper-case the check digit; blank values become ``None``."""
    if value is None:
        return None
    value = value.strip().upper()
    return value or None


def is_valid_rut(value: str) -> bool:
    return bool(RUT_PATTERN.match(value))


class Customer(BaseModel):
    """Customer aggregate root.

    ``tax_id`` is nullable so several customers without a RUT can coexist
    under the unique constraint.
    """

    name = models.CharField(max_length=100)
    tax_id = models.CharField(max_length=20, unique=True, null=True, blank=True)
    email = models.EmailField(max_length=254, blank=True, default="")
    phone = models.CharField(max_length=15, blank=True, default="")
    street = models.CharField(max_length=200, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    region = models.CharField(max_length=100, blank=True, default="")
    postal_code = models.CharField(max_length=20, blank=True, default="")
    notes = models.TextField(max_length=500, blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
            models.Index(fields=["is_active"], name="customers_active_idx"),
            models.Index(fields=["name"], name="customers_name_idx"),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        self.tax_id = normalize_tax_id(self.tax_id)
        if self.tax_id and not is_valid_rut(self.tax_id):
            raise ValidationError({"tax_id": "Invalid RUT format."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        self.tax_id = normalize_tax_id(self.tax_id)
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    # ------------------------------------------------------------------
    # Display (tax id masked)
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        suffix = self.tax_id[-4:] if self.tax_id else "????"
        return f"{self.name} (RUT: ***{suffix})"
