"""Customer domain exceptions.

Raised by the Service Layer when business rules are violated and
rendered by ``modules.core.exception_handler``.
"""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFound


class CustomerAlreadyExists(DomainError):
    """A customer with the same tax id already exists."""

    status_code = 409
    code = "customer_already_exists"


class CustomerNotFound(NotFound):
    """The requested customer does not exist."""
