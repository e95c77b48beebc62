"""Unit tests for ProductService."""

from decimal import Decimal

import pytest

from modules.accounts.exceptions import Forbidden
from modules.products.dtos import AdjustStockDTO, CreateProductDTO, UpdateProductDTO
from modules.products.exceptions import ProductAlreadyExists, ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return ProductService(repository=ProductDjangoRepository())


class TestCreateProduct:
    def test_vendedor_creates_product(self, service, vendedor):
        product = service.create_product(
            CreateProductDTO(
                sku="alic-004",
                name="Alicate",
                unit_price="8750",
                unit_of_measure="unidad",
            ),
            vendedor,
        )
        assert product.sku == "ALIC-004"
        assert product.created_by == vendedor

    def test_duplicate_sku_case_insensitive(self, service, vendedor, hammer):
        with pytest.raises(ProductAlreadyExists):
            service.create_product(
                CreateProductDTO(sku="mart-001", name="Otro", unit_price="1"), vendedor
            )

    def test_facturador_is_forbidden(self, service, facturador):
        with pytest.raises(Forbidden):
            service.create_product(
                CreateProductDTO(sku="A", name="B", unit_price="1"), facturador
            )


class TestUpdateProduct:
    def test_admin_updates_price(self, service, admin_user, hammer):
        product = service.update_product(
            str(hammer.id), UpdateProductDTO(unit_price="17990"), admin_user
        )
        assert product.unit_price == Decimal("17990")

    def test_cost_price_can_be_cleared(self, service, admin_user, hammer):
        hammer.cost_price = Decimal("9000")
        hammer.save()

        product = service.update_product(
            str(hammer.id), UpdateProductDTO(cost_price=None), admin_user
        )
        assert product.cost_price is None

    def test_sku_collision(self, service, admin_user, hammer, screws):
        with pytest.raises(ProductAlreadyExists):
            service.update_product(
                str(screws.id), UpdateProductDTO(sku=hammer.sku), admin_user
            )

    def test_vendedor_cannot_update(self, service, vendedor, hammer):
        with pytest.raises(Forbidden):
            service.update_product(str(hammer.id), UpdateProductDTO(name="X"), vendedor)


class TestAdjustStock:
    def test_vendedor_adjusts_stock(self, service, vendedor, hammer):
        product = service.adjust_stock(
            str(hammer.id), AdjustStockDTO(current="3"), vendedor
        )
        assert product.stock_current == Decimal("3")
        assert product.is_low_stock is True

    def test_facturador_cannot_adjust(self, service, facturador, hammer):
        with pytest.raises(Forbidden):
            service.adjust_stock(str(hammer.id), AdjustStockDTO(current="3"), facturador)

    def test_unknown_product(self, service, vendedor):
        with pytest.raises(ProductNotFound):
            service.adjust_stock(
                "00000000-0000-0000-0000-000000000000",
                AdjustStockDTO(current="1"),
                vendedor,
            )


class TestDeleteProduct:
    def test_soft_delete(self, service, admin_user, hammer):
        service.delete_product(str(hammer.id), admin_user)
        hammer.refresh_from_db()
        assert hammer.is_active is False

    def test_inactive_excluded_from_categories(self, service, admin_user, hammer, screws):
        service.delete_product(str(hammer.id), admin_user)
        assert service.list_categories() == ["Tornillería"]
