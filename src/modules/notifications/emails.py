"""Rendering of notification e-mails from Django templates.

Rendering happens before fan-out, on the calling thread, so the worker
threads never touch the database.
"""

from __future__ import annotations

from typing import Any, Dict

from django.template.loader import render_to_string
from django.utils import timezone

from modules.notifications.dispatcher import RenderedEmail
from modules.orders.constants import OrderStatus


def _render(template: str, subject: str, context: Dict[str, Any]) -> RenderedEmail:
    context = {**context, "sent_at": timezone.localtime()}
    return RenderedEmail(
        subject=subject,
        text_body=render_to_string(f"notifications/{template}.txt", context),
        html_body=render_to_string(f"notifications/{template}.html", context),
    )


def _order_context(order: Any) -> Dict[str, Any]:
    items = list(order.items.all())
    return {
        "order": order,
        "customer": order.customer,
        "items": items,
        "total": sum((item.subtotal for item in items), 0),
        "created_by": order.created_by,
        "status_label": OrderStatus(order.status).label,
    }


def order_created_email(order: Any) -> RenderedEmail:
    return _render(
        "order_created",
        f"Nuevo pedido {order.order_number} - {order.customer.name}",
        _order_context(order),
    )


def order_status_changed_email(order: Any, old_status: str, new_status: str) -> RenderedEmail:
    context = _order_context(order)
    context.update(
        old_status_label=OrderStatus(old_status).label if old_status else "",
        new_status_label=OrderStatus(new_status).label,
    )
    return _render(
        "order_status_changed",
        f"Pedido {order.order_number}: {context['old_status_label']} → {context['new_status_label']}",
        context,
    )


def order_delivered_email(order: Any) -> RenderedEmail:
    return _render(
        "order_delivered",
        f"Pedido {order.order_number} entregado",
        _order_context(order),
    )


def configuration_check_email() -> RenderedEmail:
    return _render("configuration_check", "Prueba de configuración de correo", {})
