"""Unit tests for notification e-mail rendering."""

import pytest

from modules.notifications import emails

pytestmark = pytest.mark.unit


class TestOrderEmails:
    def test_order_created(self, make_order, customer):
        order = make_order(notes="Entregar en bodega")

        rendered = emails.order_created_email(order)

        assert rendered.subject == f"Nuevo pedido {order.order_number} - {customer.name}"
        assert customer.name in rendered.text_body
        assert "Martillo Carpintero 16oz" in rendered.text_body
        assert "Entregar en bodega" in rendered.text_body
        assert order.order_number in rendered.html_body

    def test_status_changed_uses_labels(self, make_order):
        order = make_order()

        rendered = emails.order_status_changed_email(order, "pendiente", "facturado")

        assert "Pendiente" in rendered.subject
        assert "Facturado" in rendered.subject

    def test_delivered(self, make_order):
        order = make_order()
        rendered = emails.order_delivered_email(order)
        assert rendered.subject == f"Pedido {order.order_number} entregado"

    def test_configuration_check(self):
        rendered = emails.configuration_check_email()
        assert rendered.subject
        assert rendered.text_body.strip()
        assert rendered.html_body.strip()
