"""Customer service layer (Use Cases).

Orchestrates business logic for the Customer aggregate, delegating
persistence to the injected ``ICustomerRepository``.

Rules enforced here:
- Only roles allowed by the access policy may mutate customers.
- RUT must be unique when present.
- Deletion is a soft delete (``is_active=False``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import transaction

from modules.accounts.policy import Operation, ensure_allowed
from modules.customers.exceptions import CustomerAlreadyExists, CustomerNotFound
from modules.customers.models import Customer

if TYPE_CHECKING:
    from modules.customers.dtos import CreateCustomerDTO, UpdateCustomerDTO
    from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = (
    "name",
    "tax_id",
    "email",
    "phone",
    "street",
    "city",
    "region",
    "postal_code",
    "notes",
    "is_active",
)


class CustomerService:
    """Application service for Customer use-cases.

    Receives an ``ICustomerRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: ICustomerRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_customer(self, dto: CreateCustomerDTO, actor: Any) -> Customer:
        """Create a new customer.

        Raises:
            Forbidden: actor may not create customers.
            CustomerAlreadyExists: the RUT is already registered.
        """
        ensure_allowed(actor, Operation.CREATE_CUSTOMER)
        log = logger.bind(user_id=getattr(actor, "pk", None))

        if dto.tax_id and self._repo.get_by_tax_id(dto.tax_id):
            log.warning("customer.duplicate_tax_id")
            raise CustomerAlreadyExists("A customer with this RUT already exists.")

        customer = Customer(
            name=dto.name,
            tax_id=dto.tax_id,
            email=dto.email or "",
            phone=dto.phone,
            street=dto.street,
            city=dto.city,
            region=dto.region,
            postal_code=dto.postal_code,
            notes=dto.notes,
            created_by=actor,
        )
        customer = self._repo.save(customer)
        log.info("customer.created", customer_id=str(customer.id))
        return customer

    @transaction.atomic
    def update_customer(
        self, id: str, dto: UpdateCustomerDTO, actor: Any
    ) -> Customer:
        """Update the fields present in *dto*.

        Raises:
            Forbidden: actor is not an admin.
            CustomerNotFound: the customer does not exist.
            CustomerAlreadyExists: the new RUT collides with another customer.
        """
        ensure_allowed(actor, Operation.UPDATE_CUSTOMER)

        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")

        log = logger.bind(customer_id=str(id))
        supplied = dto.model_fields_set

        if "tax_id" in supplied and dto.tax_id and dto.tax_id != customer.tax_id:
            existing = self._repo.get_by_tax_id(dto.tax_id)
            if existing and existing.id != customer.id:
                log.warning("customer.duplicate_tax_id")
                raise CustomerAlreadyExists("A customer with this RUT already exists.")

        for field in _UPDATABLE_FIELDS:
            if field not in supplied:
                continue
            value = getattr(dto, field)
            if field == "email":
                value = value or ""
            elif value is None and field != "tax_id":
                continue
            setattr(customer, field, value)

        customer = self._repo.save(customer)
        log.info("customer.updated", fields=sorted(supplied))
        return customer

    @transaction.atomic
    def delete_customer(self, id: str, actor: Any) -> None:
        """Soft-delete a customer.

        Raises:
            Forbidden: actor is not an admin.
            CustomerNotFound: the customer does not exist.
        """
        ensure_allowed(actor, Operation.DELETE_CUSTOMER)
        if not self._repo.delete(id):
            raise CustomerNotFound(f"Customer {id} not found.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_customers(self, filters: Optional[Dict[str, Any]] = None):
        """Return customers, optionally filtered."""
        return self._repo.list(filters)

    def get_customer(self, id: str) -> Customer:
        """Retrieve a single customer by ID.

        Raises:
            CustomerNotFound: if the customer does not exist.
        """
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")
        return customer
