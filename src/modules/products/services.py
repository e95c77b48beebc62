"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Rules enforced here:
- Only roles allowed by the access policy may mutate products.
- SKU must be unique.
- Deletion is a soft delete (``is_active=False``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.accounts.policy import Operation, ensure_allowed
from modules.products.exceptions import ProductAlreadyExists, ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import (
        AdjustStockDTO,
        CreateProductDTO,
        UpdateProductDTO,
    )
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = (
    "sku",
    "name",
    "unit_price",
    "cost_price",
    "description",
    "brand",
    "format",
    "stock_current",
    "min_stock",
    "category",
    "unit_of_measure",
    "is_active",
)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO, actor: Any) -> Product:
        """Create a new product after enforcing SKU uniqueness.

        Raises:
            Forbidden: actor may not create products.
            ProductAlreadyExists: the SKU is already taken.
        """
        ensure_allowed(actor, Operation.CREATE_PRODUCT)
        log = logger.bind(sku=dto.sku)

        if self._repo.get_by_sku(dto.sku):
            log.warning("product.duplicate_sku")
            raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.")

        product = Product(
            sku=dto.sku,
            name=dto.name,
            description=dto.description,
            brand=dto.brand,
            format=dto.format,
            unit_price=dto.unit_price,
            cost_price=dto.cost_price,
            stock_current=dto.stock_current,
            min_stock=dto.min_stock,
            category=dto.category,
            unit_of_measure=dto.unit_of_measure.value,
            created_by=actor,
        )
        product = self._repo.save(product)
        log.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO, actor: Any) -> Product:
        """Update an existing product with the supplied fields.

        Raises:
            Forbidden: actor is not an admin.
            ProductNotFound: the product does not exist.
            ProductAlreadyExists: the new SKU collides with another product.
        """
        ensure_allowed(actor, Operation.UPDATE_PRODUCT)

        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        log = logger.bind(product_id=str(id))

        if dto.sku is not None and dto.sku != product.sku:
            existing = self._repo.get_by_sku(dto.sku)
            if existing and existing.id != product.id:
                log.warning("product.duplicate_sku", sku=dto.sku)
                raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.")

        supplied = dto.model_fields_set
        for field in _UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)
            elif field == "cost_price" and field in supplied:
                product.cost_price = None

        product = self._repo.save(product)
        log.info("product.updated")
        return product

    @transaction.atomic
    def adjust_stock(self, id: str, dto: AdjustStockDTO, actor: Any) -> Product:
        """Set current stock and/or the low-stock threshold.

        Raises:
            Forbidden: actor may not adjust stock.
            ProductNotFound: the product does not exist.
        """
        ensure_allowed(actor, Operation.ADJUST_STOCK)

        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        previous = product.stock_current
        if dto.current is not None:
            product.stock_current = dto.current
        if dto.min_stock is not None:
            product.min_stock = dto.min_stock

        product = self._repo.save(product)
        logger.info(
            "product.stock_adjusted",
            product_id=str(id),
            previous=str(previous),
            current=str(product.stock_current),
            min_stock=str(product.min_stock),
            low_stock=product.is_low_stock,
        )
        return product

    @transaction.atomic
    def delete_product(self, id: str, actor: Any) -> None:
        """Soft-delete a product.

        Raises:
            Forbidden: actor is not an admin.
            ProductNotFound: the product does not exist.
        """
        ensure_allowed(actor, Operation.DELETE_PRODUCT)
        if not self._repo.delete(id):
            raise ProductNotFound(f"Product {id} not found.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, filters: Optional[Dict[str, Any]] = None):
        """Return products, optionally filtered."""
        return self._repo.list(filters)

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def list_categories(self) -> List[str]:
        return self._repo.list_categories()
