"""Customer repository interface.

Extends ``IRepository[Customer]`` with the tax-id look-up used to keep
RUTs unique.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer


class ICustomerRepository(IRepository["Customer"]):
    """Repository contract for the Customer aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Customer]":
        """List customers with optional filters."""

    @abstractmethod
    def get_by_tax_id(self, tax_id: str) -> Optional[Customer]:
        """Retrieve a customer by RUT."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Deactivate by ID; ``False`` when nothing matched."""
