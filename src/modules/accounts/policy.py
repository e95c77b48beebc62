"""Access policy: which role may invoke which operation.

The capability table is static and is consulted once per service call,
before any lookup or write happens.  A denied call raises ``Forbidden``
with a generic message that does not reveal which roles would be
allowed.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, FrozenSet, Optional

import structlog

from modules.accounts.exceptions import Forbidden
from modules.accounts.models import Role

logger = structlog.get_logger(__name__)


class Operation(enum.Enum):
    CREATE_CUSTOMER = "create_customer"
    UPDATE_CUSTOMER = "update_customer"
    DELETE_CUSTOMER = "delete_customer"
    CREATE_PRODUCT = "create_product"
    UPDATE_PRODUCT = "update_product"
    DELETE_PRODUCT = "delete_product"
    ADJUST_STOCK = "adjust_stock"
    CREATE_ORDER = "create_order"
    CHANGE_ORDER_STATUS = "change_order_status"
    MARK_DELIVERED = "mark_delivered"
    NULLIFY_ORDER = "nullify_order"
    UPDATE_ORDER = "update_order"
    REPLACE_ORDER = "replace_order"
    DELETE_ORDER = "delete_order"
    MANAGE_USERS = "manage_users"
    MANAGE_NOTIFICATIONS = "manage_notifications"


CAPABILITIES: Dict[str, FrozenSet[Operation]] = {
    Role.ADMIN: frozenset(Operation),
    Role.VENDEDOR: frozenset(
        {
            Operation.CREATE_CUSTOMER,
            Operation.CREATE_PRODUCT,
            Operation.ADJUST_STOCK,
            Operation.CREATE_ORDER,
        }
    ),
    Role.FACTURADOR: frozenset(
        {
            Operation.CHANGE_ORDER_STATUS,
            Operation.MARK_DELIVERED,
            Operation.NULLIFY_ORDER,
            Operation.UPDATE_ORDER,
        }
    ),
}


def role_of(actor: Any) -> Optional[str]:
    """Return the effective role of *actor* (``None`` if anonymous/inactive)."""
    if actor is None or not getattr(actor, "is_authenticated", False):
        return None
    if not getattr(actor, "is_active", True):
        return None
    if getattr(actor, "is_superuser", False):
        return Role.ADMIN
    return getattr(actor, "role", None)


def is_allowed(actor: Any, operation: Operation) -> bool:
    role = role_of(actor)
    return role is not None and operation in CAPABILITIES.get(role, frozenset())


def ensure_allowed(actor: Any, operation: Operation) -> None:
    """Raise ``Forbidden`` unless *actor* may perform *operation*."""
    if is_allowed(actor, operation):
        return
    logger.warning(
        "access.denied",
        user_id=getattr(actor, "pk", None),
        role=role_of(actor),
        operation=operation.value,
    )
    raise Forbidden("You do not have permission to perform this action.")
