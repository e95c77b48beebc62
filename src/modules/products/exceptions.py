"""Product domain exceptions.

Raised by the Service Layer when business rules are violated and
rendered by ``modules.core.exception_handler``.
"""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFound


class ProductAlreadyExists(DomainError):
    """A product with the same SKU already exists."""

    status_code = 409
    code = "product_already_exists"


class ProductNotFound(NotFound):
    """The requested product does not exist."""
