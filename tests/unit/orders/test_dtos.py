"""Unit tests for Order DTOs."""

from datetime import date
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.constants import MAX_ORDER_ITEMS
from modules.orders.dtos import CreateOrderDTO, OrderItemInputDTO, UpdateOrderDTO

pytestmark = pytest.mark.unit


def _payload(**overrides):
    data = {
        "customer_id": str(uuid4()),
        "items": [{"product_id": str(uuid4()), "quantity": "2"}],
        "delivery_due": "2025-04-01",
    }
    data.update(overrides)
    return data


class TestOrderItemInputDTO:
    @pytest.mark.parametrize("quantity", ["0", "-1"])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationError):
            OrderItemInputDTO(product_id=uuid4(), quantity=quantity)

    def test_optional_attributes_default_to_none(self):
        item = OrderItemInputDTO(product_id=uuid4(), quantity="1")
        assert item.unit_price is None
        assert item.brand is None
        assert item.unit_of_measure is None


class TestCreateOrderDTO:
    def test_valid_payload(self):
        dto = CreateOrderDTO.model_validate(_payload())
        assert dto.delivery_due == date(2025, 4, 1)
        assert len(dto.items) == 1

    def test_items_required(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO.model_validate(_payload(items=[]))

    def test_item_limit(self):
        items = [
            {"product_id": str(uuid4()), "quantity": "1"}
            for _ in range(MAX_ORDER_ITEMS + 1)
        ]
        with pytest.raises(ValidationError):
            CreateOrderDTO.model_validate(_payload(items=items))

    def test_delivery_due_required(self):
        payload = _payload()
        del payload["delivery_due"]
        with pytest.raises(ValidationError):
            CreateOrderDTO.model_validate(payload)

    def test_blank_idempotency_key_is_none(self):
        dto = CreateOrderDTO.model_validate(_payload(idempotency_key=""))
        assert dto.idempotency_key is None

    def test_invalid_customer_id(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO.model_validate(_payload(customer_id="abc"))


class TestUpdateOrderDTO:
    def test_status_is_free_text(self):
        dto = UpdateOrderDTO(status="enviado")
        assert dto.status == "enviado"

    def test_explicit_null_delivery_due_is_supplied(self):
        dto = UpdateOrderDTO.model_validate({"delivery_due": None})
        assert "delivery_due" in dto.model_fields_set
