"""Order service layer (Use Cases).

Orchestrates business logic for the Order aggregate, delegating
persistence to the injected repositories.

Rules enforced here:
- Every mutation checks the access policy first.
- Order lines must reference existing, active products.
- A new request for a customer with open orders placed within the
  consolidation window is merged into those orders instead of creating
  a new one.
- Only invoiced orders can be marked as delivered.
- Only pending/purchasing orders older than ``ORDER_NULLIFY_MIN_DAYS``
  can be nullified by a biller.
- Status changes cascade to every line (``Order.apply_status``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from modules.accounts.policy import Operation, ensure_allowed
from modules.orders.consolidation import (
    DuplicateLine,
    find_duplicates,
    unmatched_products,
    window_start,
)
from modules.orders.constants import OPEN_STATUSES, OrderStatus
from modules.orders.dtos import CreateOrderResult
from modules.orders.events import (
    OrderCreated,
    OrderDelivered,
    OrderItemsMerged,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    CustomerNotFound,
    InactiveCustomer,
    InvalidOrderStatus,
    InvalidReference,
    InvalidTransition,
    OrderNotFound,
    TooEarly,
)
from modules.orders.models import Order, OrderCreationRequest

if TYPE_CHECKING:
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.dtos import (
        CreateOrderDTO,
        OrderItemInputDTO,
        ReplaceOrderDTO,
        UpdateOrderDTO,
    )
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def parse_status(value: str) -> OrderStatus:
    """Return the ``OrderStatus`` for *value* or raise ``InvalidOrderStatus``."""
    try:
        return OrderStatus(value)
    except ValueError:
        valid = ", ".join(OrderStatus.values)
        raise InvalidOrderStatus(
            f"'{value}' is not a valid status. Valid statuses: {valid}."
        ) from None


class OrderService:
    """Application service for Order use-cases.

    Receives its repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Create / consolidate
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO, actor: Any) -> CreateOrderResult:
        """Create an order, or merge it into the customer's open orders.

        Flow:
        1. With an idempotency key, lock the key's creation record and
           replay its stored outcome when the key was already used.
        2. Validate the customer and every product reference.
        3. Lock the customer's open orders created within the
           consolidation window and look for lines with the same product.
        4. With matches, add each incoming quantity to every matching line
           (incoming lines without a match are reported as skipped).
           Otherwise create a new pending order.

        Raises:
            Forbidden: actor may not create orders.
            CustomerNotFound / InactiveCustomer: bad customer reference.
            InvalidReference: one or more products are missing or inactive.
        """
        ensure_allowed(actor, Operation.CREATE_ORDER)
        log = logger.bind(
            customer_id=str(dto.customer_id),
            user_id=actor.pk,
            idempotency_key=dto.idempotency_key,
        )

        request = None
        if dto.idempotency_key:
            request = self._order_repo.claim_request(dto.idempotency_key)
            if request.result:
                log.info("order.idempotent_replay", result=request.result)
                return self._replay(request)

        self._ensure_customer(dto.customer_id)
        products = self._resolve_products(dto.items)

        since = window_start(
            timezone.now(), settings.ORDER_CONSOLIDATION_WINDOW_HOURS
        )
        candidates = self._order_repo.find_open_since(dto.customer_id, since)
        duplicates = find_duplicates(dto.items, candidates)
        if duplicates:
            outcome = self._merge(dto, duplicates, actor, log)
            if request is not None:
                self._order_repo.complete_request(
                    request,
                    result=outcome.result,
                    merged=outcome.merged,
                    consolidated_orders=outcome.consolidated_orders,
                    skipped_product_ids=[str(pid) for pid in outcome.skipped_product_ids],
                )
            return outcome

        order = self._order_repo.create(
            {
                "customer_id": dto.customer_id,
                "items": [_line_data(item, products[item.product_id]) for item in dto.items],
                "delivery_due": dto.delivery_due,
                "notes": dto.notes,
                "location": dto.location,
                "created_by": actor,
                "idempotency_key": dto.idempotency_key,
            }
        )
        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_id=str(dto.customer_id),
                created_by_id=actor.pk,
            )
        )
        self._order_repo.save(order)
        if request is not None:
            self._order_repo.complete_request(request, result="created", order=order)

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(dto.items),
        )
        return CreateOrderResult(
            result="created", order=self._order_repo.get_by_id(str(order.id))
        )

    def _merge(
        self,
        dto: CreateOrderDTO,
        duplicates: List[DuplicateLine],
        actor: Any,
        log: Any,
    ) -> CreateOrderResult:
        touched: Dict[Any, int] = {}
        numbers: List[str] = []
        for match in duplicates:
            self._order_repo.merge_quantity(
                match.item_id,
                match.quantity,
                idempotency_key=dto.idempotency_key,
                actor=actor,
            )
            touched[match.order_id] = touched.get(match.order_id, 0) + 1
            numbers.append(match.order_number)

        for order_id, merged_lines in touched.items():
            order = self._order_repo.get_for_update(str(order_id))
            order.updated_by = actor
            order.add_domain_event(
                OrderItemsMerged(
                    aggregate_id=order.id,
                    order_number=order.order_number,
                    merged_lines=merged_lines,
                )
            )
            self._order_repo.save(order)

        skipped = unmatched_products(dto.items, duplicates)
        if skipped:
            log.warning(
                "order.merge_skipped_items",
                product_ids=[str(pid) for pid in skipped],
            )
        log.info(
            "order.merged",
            merged=len(duplicates),
            consolidated_orders=numbers,
        )
        return CreateOrderResult(
            result="merged",
            merged=len(duplicates),
            consolidated_orders=numbers,
            skipped_product_ids=skipped,
        )

    def _replay(self, request: OrderCreationRequest) -> CreateOrderResult:
        if request.result == "created":
            return CreateOrderResult(
                result="created",
                order=self._order_repo.get_by_id(str(request.order_id)),
                replayed=True,
            )
        return CreateOrderResult(
            result="merged",
            merged=request.merged,
            consolidated_orders=list(request.consolidated_orders),
            skipped_product_ids=[UUID(pid) for pid in request.skipped_product_ids],
            replayed=True,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @transaction.atomic
    def change_status(self, order_id: str, status: str, actor: Any) -> Order:
        """Move an order (and every line) to *status*.

        Any status can be reached from any other.  Setting the current
        status again leaves the order unchanged apart from ``updated_by``.

        Raises:
            Forbidden: actor may not change statuses.
            InvalidOrderStatus: *status* is not a known status.
            OrderNotFound: the order does not exist.
        """
        ensure_allowed(actor, Operation.CHANGE_ORDER_STATUS)
        new_status = parse_status(status)
        order = self._get_locked(order_id)
        self._transition(order, new_status, actor)
        self._order_repo.save(order)
        return self._reload(order)

    @transaction.atomic
    def mark_delivered(self, order_id: str, actor: Any) -> Order:
        """Stamp the delivery time of an invoiced order.

        Calling it again on a delivered order overwrites the timestamp.

        Raises:
            Forbidden: actor may not mark deliveries.
            OrderNotFound: the order does not exist.
            InvalidTransition: the order is not invoiced.
        """
        ensure_allowed(actor, Operation.MARK_DELIVERED)
        order = self._get_locked(order_id)
        log = logger.bind(order_id=str(order.id), order_number=order.order_number)

        if order.status != OrderStatus.INVOICED:
            log.warning("order.deliver_rejected", status=order.status)
            raise InvalidTransition(
                f"Only invoiced orders can be marked as delivered "
                f"(current status: {order.status})."
            )
        order.delivered_at = timezone.now()
        order.updated_by = actor
        order.add_domain_event(
            OrderDelivered(
                aggregate_id=order.id,
                order_number=order.order_number,
                delivered_by_id=actor.pk,
            )
        )
        self._order_repo.save(order)
        log.info("order.delivered", delivered_at=order.delivered_at.isoformat())
        return self._reload(order)

    @transaction.atomic
    def nullify_order(self, order_id: str, actor: Any) -> Order:
        """Nullify a pending or purchasing order.

        The status is checked before the age: an invoiced order is
        rejected with ``InvalidTransition`` whatever its age.

        Raises:
            Forbidden: actor may not nullify orders.
            OrderNotFound: the order does not exist.
            InvalidTransition: the order is invoiced or already nullified.
            TooEarly: fewer than ``ORDER_NULLIFY_MIN_DAYS`` whole days have
                passed since creation.
        """
        ensure_allowed(actor, Operation.NULLIFY_ORDER)
        order = self._get_locked(order_id)
        log = logger.bind(order_id=str(order.id), order_number=order.order_number)

        if order.status not in OPEN_STATUSES:
            log.warning("order.nullify_rejected", status=order.status)
            raise InvalidTransition(
                f"Only pending or purchasing orders can be nullified "
                f"(current status: {order.status})."
            )

        min_days = settings.ORDER_NULLIFY_MIN_DAYS
        elapsed = order.days_since_creation()
        if elapsed < min_days:
            log.warning("order.nullify_too_early", days_elapsed=elapsed)
            raise TooEarly(elapsed, min_days)

        self._transition(order, OrderStatus.NULLIFIED, actor, notes="Nullified")
        self._order_repo.save(order)
        return self._reload(order)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    @transaction.atomic
    def update_order(self, order_id: str, dto: UpdateOrderDTO, actor: Any) -> Order:
        """Apply the supplied fields to an order.

        ``items``, when supplied, replaces every line.  Product references
        must exist but may be inactive; missing line attributes are copied
        from the product.

        Raises:
            Forbidden: actor may not edit orders.
            InvalidOrderStatus: unknown ``status``.
            OrderNotFound / CustomerNotFound: bad references.
            InvalidReference: a line references an unknown product.
        """
        ensure_allowed(actor, Operation.UPDATE_ORDER)
        new_status = parse_status(dto.status) if dto.status is not None else None
        order = self._get_locked(order_id)
        supplied = dto.model_fields_set

        if dto.customer_id is not None:
            self._ensure_customer(dto.customer_id, require_active=False)
            order.customer_id = dto.customer_id
        if dto.items is not None:
            products = self._resolve_products(dto.items, active_only=False)
            self._order_repo.replace_items(
                order,
                [_line_data(item, products[item.product_id]) for item in dto.items],
            )
        for field in ("notes", "location"):
            value = getattr(dto, field)
            if value is not None:
                setattr(order, field, value)
        if "delivery_due" in supplied:
            order.delivery_due = dto.delivery_due

        order.updated_by = actor
        if new_status is not None:
            self._transition(order, new_status, actor)
        self._order_repo.save(order)
        logger.info(
            "order.updated", order_id=str(order.id), fields=sorted(supplied)
        )
        return self._reload(order)

    @transaction.atomic
    def replace_order(self, order_id: str, dto: ReplaceOrderDTO, actor: Any) -> Order:
        """Replace an order's customer, lines and details (administrators).

        Raises:
            Forbidden: actor is not an admin.
            InvalidOrderStatus: unknown ``status``.
            OrderNotFound / CustomerNotFound / InactiveCustomer.
            InvalidReference: a line references a missing or inactive product.
        """
        ensure_allowed(actor, Operation.REPLACE_ORDER)
        new_status = parse_status(dto.status) if dto.status is not None else None
        order = self._get_locked(order_id)

        self._ensure_customer(dto.customer_id)
        products = self._resolve_products(dto.items)
        self._order_repo.replace_items(
            order,
            [_line_data(item, products[item.product_id]) for item in dto.items],
        )
        order.customer_id = dto.customer_id
        order.delivery_due = dto.delivery_due
        order.notes = dto.notes
        order.location = dto.location
        order.updated_by = actor
        if new_status is not None:
            self._transition(order, new_status, actor)
        self._order_repo.save(order)
        logger.info("order.replaced", order_id=str(order.id))
        return self._reload(order)

    @transaction.atomic
    def delete_order(self, order_id: str, actor: Any) -> Order:
        """Administrative removal: the order is nullified, whatever its
        status or age, and kept for history.

        Raises:
            Forbidden: actor is not an admin.
            OrderNotFound: the order does not exist.
        """
        ensure_allowed(actor, Operation.DELETE_ORDER)
        order = self._get_locked(order_id)
        self._transition(
            order, OrderStatus.NULLIFIED, actor, notes="Removed by administrator"
        )
        self._order_repo.save(order)
        return self._reload(order)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_orders(self, filters: Optional[Dict[str, Any]] = None):
        """Return orders, optionally filtered."""
        return self._order_repo.list(filters)

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_locked(self, order_id: str) -> Order:
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def _reload(self, order: Order) -> Order:
        return self._order_repo.get_by_id(str(order.id))

    def _transition(
        self, order: Order, new_status: str, actor: Any, notes: str = ""
    ) -> None:
        previous = order.apply_status(new_status)
        order.updated_by = actor
        if previous == new_status:
            return
        order._status_change_notes = notes
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                order_number=order.order_number,
                old_status=previous,
                new_status=new_status,
                changed_by_id=actor.pk,
            )
        )
        logger.info(
            "order.status_changed",
            order_id=str(order.id),
            order_number=order.order_number,
            old_status=previous,
            new_status=new_status,
            user_id=actor.pk,
        )

    def _ensure_customer(self, customer_id: Any, require_active: bool = True) -> None:
        customer = self._customer_repo.get_by_id(str(customer_id))
        if not customer:
            raise CustomerNotFound(f"Customer {customer_id} not found.")
        if require_active and not customer.is_active:
            raise InactiveCustomer(f"Customer {customer_id} is inactive.")

    def _resolve_products(
        self, items: List[OrderItemInputDTO], active_only: bool = True
    ) -> Dict[Any, Product]:
        products = self._product_repo.get_by_ids(
            [item.product_id for item in items], active_only=active_only
        )
        missing = {item.product_id for item in items} - products.keys()
        if missing:
            logger.warning(
                "order.invalid_products",
                product_ids=sorted(str(pid) for pid in missing),
            )
            raise InvalidReference(missing)
        return products


def _line_data(item: OrderItemInputDTO, product: Product) -> Dict[str, Any]:
    """Line attributes, with missing values copied from *product*."""
    return {
        "product_id": item.product_id,
        "quantity": item.quantity,
        "unit_price": (
            item.unit_price if item.unit_price is not None else product.unit_price
        ),
        "unit_of_measure": (
            item.unit_of_measure.value
            if item.unit_of_measure is not None
            else product.unit_of_measure
        ),
        "brand": item.brand if item.brand is not None else product.brand,
        "format": item.format if item.format is not None else product.format,
        "notes": item.notes,
    }
