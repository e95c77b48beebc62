"""Integration tests for the Customer API."""

import pytest

from modules.customers.models import Customer

pytestmark = pytest.mark.integration

URL = "/api/v1/customers/"


class TestCustomerCreate:
    def test_vendedor_creates_customer(self, vendedor_client):
        response = vendedor_client.post(
            URL,
            {"name": "Ferretería Norte", "tax_id": "76.543.210-k", "city": "Arica"},
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Customer created."
        assert body["data"]["tax_id"] == "76.543.210-K"
        assert body["data"]["created_by"] == "vendedor"

    def test_facturador_cannot_create(self, facturador_client):
        response = facturador_client.post(URL, {"name": "X"}, format="json")
        assert response.status_code == 403
        assert Customer.objects.count() == 0

    def test_name_required(self, vendedor_client):
        response = vendedor_client.post(URL, {"city": "Arica"}, format="json")
        assert response.status_code == 400


class TestCustomerRead:
    def test_any_role_can_list(self, facturador_client, customer, other_customer):
        response = facturador_client.get(URL)

        assert response.status_code == 200
        assert response.json()["count"] == 2

    def test_search_by_name(self, vendedor_client, customer, other_customer):
        response = vendedor_client.get(URL, {"search": "martillo"})
        results = response.json()["results"]
        assert [c["id"] for c in results] == [str(customer.id)]

    def test_filter_active(self, vendedor_client, customer, other_customer):
        other_customer.is_active = False
        other_customer.save()

        response = vendedor_client.get(URL, {"active": "true"})

        assert [c["id"] for c in response.json()["results"]] == [str(customer.id)]

    def test_retrieve(self, vendedor_client, customer):
        response = vendedor_client.get(f"{URL}{customer.id}/")
        assert response.status_code == 200
        assert response.json()["name"] == customer.name


class TestCustomerUpdateDelete:
    def test_admin_patches(self, admin_client, customer):
        response = admin_client.patch(
            f"{URL}{customer.id}/", {"phone": "+56911111111"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["data"]["phone"] == "+56911111111"

    def test_vendedor_cannot_patch(self, vendedor_client, customer):
        response = vendedor_client.patch(
            f"{URL}{customer.id}/", {"phone": "1"}, format="json"
        )
        assert response.status_code == 403

    def test_admin_soft_deletes(self, admin_client, customer):
        response = admin_client.delete(f"{URL}{customer.id}/")

        assert response.status_code == 204
        customer.refresh_from_db()
        assert customer.is_active is False
