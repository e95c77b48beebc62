"""Order domain constants.

Status values are stored in Spanish, as used by the business:
``pendiente`` → ``compra`` → ``facturado`` (then delivered), or ``nulo``.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pendiente", "Pendiente"
    PURCHASING = "compra", "Compra"
    INVOICED = "facturado", "Facturado"
    NULLIFIED = "nulo", "Nulo"


# Orders (and lines) that can still absorb merged quantities, be nullified,
# and whose delivery mark is retracted when moved back into them.
OPEN_STATUSES: frozenset[str] = frozenset(
    {OrderStatus.PENDING, OrderStatus.PURCHASING}
)

MAX_ORDER_ITEMS = 20

ORDER_NUMBER_SEQUENCE = "order_number"


def format_order_number(value: int) -> str:
    """``OC-000042`` style human-readable order number."""
    return f"OC-{value:06d}"
