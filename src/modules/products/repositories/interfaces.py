"""Product repository interface.

Extends ``IRepository[Product]`` with the SKU look-up (unique SKU), the
id-set look-up used to validate order lines and the category listing.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List products with optional filters."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU."""

    @abstractmethod
    def get_by_ids(
        self, ids: Iterable[UUID], active_only: bool = True
    ) -> Dict[UUID, Product]:
        """Resolve a set of ids in one query, keyed by id.

        Ids that do not resolve (or resolve to inactive products when
        ``active_only``) are simply absent from the result.
        """

    @abstractmethod
    def list_categories(self) -> List[str]:
        """Distinct, non-blank categories of active products."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Deactivate by ID; ``False`` when nothing matched."""
