"""Order domain exceptions.

Raised by the Service Layer when business rules are violated and
translated into HTTP responses by ``modules.core.exception_handler``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable
from uuid import UUID

from modules.core.exceptions import DomainError, NotFound


class OrderNotFound(NotFound):
    """The requested order does not exist."""


class CustomerNotFound(NotFound):
    """The customer referenced by the order does not exist."""


class InactiveCustomer(DomainError):
    """The customer is inactive and cannot place orders."""

    code = "inactive_customer"
    field = "customer_id"


class InvalidReference(DomainError):
    """One or more order lines reference missing or inactive products."""

    code = "invalid_reference"
    field = "items"

    def __init__(self, product_ids: Iterable[UUID]) -> None:
        self.product_ids = sorted(product_ids, key=str)
        listed = ", ".join(str(pid) for pid in self.product_ids)
        super().__init__(f"Products not found or inactive: {listed}.")


class InvalidOrderStatus(DomainError):
    """The requested status is not one of the known statuses."""

    code = "invalid_status"
    field = "status"


class OrderLifecycleError(DomainError):
    """The order is not in a state that allows the requested operation."""

    status_code = 409
    code = "lifecycle_conflict"


class InvalidTransition(OrderLifecycleError):
    """The operation is not permitted from the current status."""

    code = "invalid_transition"


class TooEarly(OrderLifecycleError):
    """The order is younger than the minimum age for nullification."""

    code = "too_early"

    def __init__(self, days_elapsed: int, min_days: int) -> None:
        self.days_elapsed = days_elapsed
        self.min_days = min_days
        super().__init__(
            f"Orders can only be nullified {min_days} days after creation "
            f"({days_elapsed} days elapsed)."
        )

    def details(self) -> Dict[str, Any]:
        return {"days_elapsed": self.days_elapsed, "min_days": self.min_days}
