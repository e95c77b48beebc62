"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
instead of raising; the Service Layer decides how to translate a
missing entity into a domain error.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None):
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"is_active": True}
            {"category__iexact": "ferreteria"}
        """
        queryset = Product.objects.select_related("created_by")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        is_new = entity._state.adding
        entity.save()
        logger.info(
            "product.saved",
            product_id=str(entity.id),
            sku=entity.sku,
            is_new=is_new,
        )
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete a product by clearing its active flag.

        Returns ``True`` if the product was found, ``False`` otherwise.
        """
        product = self.get_by_id(id)
        if not product:
            return False
        product.is_active = False
        product.save(update_fields=["is_active"])
        logger.info("product.soft_deleted", product_id=str(id))
        return True

    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU (case-insensitive via upper normalisation)."""
        return Product.objects.filter(sku=sku.strip().upper()).first()

    def get_by_ids(
        self, ids: Iterable[UUID], active_only: bool = True
    ) -> Dict[UUID, Product]:
        queryset = Product.objects.filter(id__in=set(ids))
        if active_only:
            queryset = queryset.filter(is_active=True)
        return {product.id: product for product in queryset}

    def list_categories(self) -> List[str]:
        return list(
            Product.objects.filter(is_active=True)
            .exclude(category="")
            .values_list("category", flat=True)
            .distinct()
            .order_by("category")
        )
