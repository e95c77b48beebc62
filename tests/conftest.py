from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from modules.accounts.models import Role
from modules.customers.models import Customer
from modules.products.models import Product, UnitOfMeasure

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users per role
# ---------------------------------------------------------------------------


@pytest.fixture()
def admin_user():
    return User.objects.create_user(
        username="admin", password="pass12345", email="admin@empresa.cl", role=Role.ADMIN
    )


@pytest.fixture()
def vendedor():
    return User.objects.create_user(
        username="vendedor",
        password="pass12345",
        email="vendedor@empresa.cl",
        role=Role.VENDEDOR,
    )


@pytest.fixture()
def facturador():
    return User.objects.create_user(
        username="facturador",
        password="pass12345",
        email="facturador@empresa.cl",
        role=Role.FACTURADOR,
    )


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture()
def vendedor_client(vendedor):
    return _client_for(vendedor)


@pytest.fixture()
def facturador_client(facturador):
    return _client_for(facturador)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer():
    return Customer.objects.create(
        name="Ferretería El Martillo",
        tax_id="96.789.123-4",
        email="compras@elmartillo.cl",
        city="Santiago",
    )


@pytest.fixture()
def other_customer():
    return Customer.objects.create(name="Construcciones Pérez", tax_id="78456789-1")


@pytest.fixture()
def hammer():
    return Product.objects.create(
        sku="MART-001",
        name="Martillo Carpintero 16oz",
        brand="Stanley",
        format="Unidad",
        unit_price=Decimal("15990"),
        stock_current=Decimal("25"),
        min_stock=Decimal("5"),
        category="Herramientas Manuales",
        unit_of_measure=UnitOfMeasure.UNIT,
    )


@pytest.fixture()
def screws():
    return Product.objects.create(
        sku="TORN-002",
        name="Tornillos Autorroscantes",
        brand="Hilti",
        format="Caja 100 unidades",
        unit_price=Decimal("4500"),
        category="Tornillería",
        unit_of_measure=UnitOfMeasure.BOX,
    )


@pytest.fixture()
def cement():
    return Product.objects.create(
        sku="CEMN-006",
        name="Cemento Especial",
        brand="Melón",
        format="Saco 25kg",
        unit_price=Decimal("6890"),
        category="Cemento",
        unit_of_measure=UnitOfMeasure.KG,
    )


@pytest.fixture()
def delivery_due() -> date:
    return timezone.localdate() + timedelta(days=5)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    from modules.customers.repositories.django_repository import (
        CustomerDjangoRepository,
    )
    from modules.orders.repositories.django_repository import OrderDjangoRepository
    from modules.orders.services import OrderService
    from modules.products.repositories.django_repository import (
        ProductDjangoRepository,
    )

    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


@pytest.fixture()
def make_order(order_service, vendedor, customer, hammer, delivery_due):
    """Create an order through the service (``vendedor`` as the actor).

    A second call for the same customer and product inside the
    consolidation window merges instead, so pass other products or age
    the first order with ``age_order``.
    """
    from modules.orders.dtos import CreateOrderDTO

    def _make(for_customer=None, items=None, **kwargs):
        dto = CreateOrderDTO(
            customer_id=(for_customer or customer).id,
            items=items or [{"product_id": hammer.id, "quantity": "2"}],
            delivery_due=kwargs.pop("delivery_due", delivery_due),
            **kwargs,
        )
        return order_service.create_order(dto, vendedor).order

    return _make


@pytest.fixture()
def age_order():
    """Move an order's creation time back by the given ``timedelta`` kwargs."""
    from modules.orders.models import Order

    def _age(order, **delta):
        created_at = timezone.now() - timedelta(**delta)
        Order.objects.filter(id=order.id).update(created_at=created_at)
        order.refresh_from_db(fields=["created_at"])
        return order

    return _age
