"""Integration tests for user administration and authentication."""

import pytest

pytestmark = pytest.mark.integration

URL = "/api/v1/users/"


class TestAuth:
    def test_obtain_token_and_call_me(self, api_client, facturador):
        response = api_client.post(
            "/api/v1/auth/token/",
            {"username": "facturador", "password": "pass12345"},
            format="json",
        )
        assert response.status_code == 200
        access = response.json()["access"]

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        me = api_client.get("/api/v1/me/")

        assert me.status_code == 200
        assert me.json()["role"] == "facturador"

    def test_wrong_password(self, api_client, facturador):
        response = api_client.post(
            "/api/v1/auth/token/",
            {"username": "facturador", "password": "nope"},
            format="json",
        )
        assert response.status_code == 401


class TestUserAdministration:
    def test_admin_lists_users(self, admin_client, vendedor, facturador):
        response = admin_client.get(URL)
        assert response.status_code == 200
        assert response.json()["count"] == 3

    def test_filter_by_role(self, admin_client, vendedor, facturador):
        response = admin_client.get(URL, {"role": "vendedor"})
        assert [u["username"] for u in response.json()["results"]] == ["vendedor"]

    def test_non_admin_cannot_list(self, vendedor_client):
        assert vendedor_client.get(URL).status_code == 403

    def test_admin_creates_user(self, admin_client):
        response = admin_client.post(
            URL,
            {
                "username": "bodega",
                "email": "bodega@empresa.cl",
                "password": "secreto1",
                "role": "vendedor",
            },
            format="json",
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["role"] == "vendedor"
        assert "password" not in data

    def test_duplicate_email(self, admin_client, vendedor):
        response = admin_client.post(
            URL,
            {
                "username": "otro",
                "email": vendedor.email,
                "password": "secreto1",
            },
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "email"

    def test_deactivate(self, admin_client, vendedor):
        response = admin_client.delete(f"{URL}{vendedor.pk}/")

        assert response.status_code == 204
        vendedor.refresh_from_db()
        assert vendedor.is_active is False

    def test_cannot_deactivate_self(self, admin_client, admin_user):
        response = admin_client.delete(f"{URL}{admin_user.pk}/")
        assert response.status_code == 400

    def test_deactivated_user_loses_access(self, vendedor, customer):
        from rest_framework.test import APIClient

        vendedor.is_active = False
        vendedor.save()
        client = APIClient()
        client.force_authenticate(user=vendedor)

        response = client.post(
            "/api/v1/customers/", {"name": "X"}, format="json"
        )

        assert response.status_code == 403


class TestPasswords:
    def test_admin_resets_password(self, admin_client, api_client, vendedor):
        response = admin_client.put(
            f"{URL}{vendedor.pk}/reset-password/",
            {"new_password": "nueva123"},
            format="json",
        )

        assert response.status_code == 200
        assert "temporary_password" not in response.json()["data"]
        token = api_client.post(
            "/api/v1/auth/token/",
            {"username": "vendedor", "password": "nueva123"},
            format="json",
        )
        assert token.status_code == 200

    def test_reset_without_password_returns_temporary_one(self, admin_client, vendedor):
        response = admin_client.put(
            f"{URL}{vendedor.pk}/reset-password/", {}, format="json"
        )

        temporary = response.json()["data"]["temporary_password"]
        vendedor.refresh_from_db()
        assert response.status_code == 200
        assert vendedor.check_password(temporary)

    def test_reset_is_admin_only(self, facturador_client, vendedor):
        response = facturador_client.put(
            f"{URL}{vendedor.pk}/reset-password/",
            {"new_password": "nueva123"},
            format="json",
        )
        assert response.status_code == 403

    def test_reset_rejects_short_password(self, admin_client, vendedor):
        response = admin_client.put(
            f"{URL}{vendedor.pk}/reset-password/",
            {"new_password": "123"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "new_password"

    def test_change_own_password(self, facturador_client, facturador):
        response = facturador_client.put(
            "/api/v1/me/password/",
            {"current_password": "pass12345", "new_password": "otra-clave"},
            format="json",
        )

        facturador.refresh_from_db()
        assert response.status_code == 200
        assert facturador.check_password("otra-clave")

    def test_change_requires_current_password(self, facturador_client, facturador):
        response = facturador_client.put(
            "/api/v1/me/password/",
            {"current_password": "wrong", "new_password": "otra-clave"},
            format="json",
        )

        facturador.refresh_from_db()
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "current_password"
        assert facturador.check_password("pass12345")

    def test_change_requires_authentication(self, api_client):
        response = api_client.put(
            "/api/v1/me/password/",
            {"current_password": "x", "new_password": "otra-clave"},
            format="json",
        )
        assert response.status_code == 401
