"""Unit tests for the role capability table."""

from __future__ import annotations

import pytest
from django.contrib.auth.models import AnonymousUser

from modules.accounts.exceptions import Forbidden
from modules.accounts.models import Role, User
from modules.accounts.policy import Operation, ensure_allowed, is_allowed, role_of

pytestmark = pytest.mark.unit


def _user(role=Role.VENDEDOR, **kwargs):
    return User(username=f"u-{role}", role=role, **kwargs)


class TestRoleOf:
    def test_anonymous_has_no_role(self):
        assert role_of(AnonymousUser()) is None

    def test_none_has_no_role(self):
        assert role_of(None) is None

    def test_inactive_user_has_no_role(self):
        assert role_of(_user(Role.ADMIN, is_active=False)) is None

    def test_superuser_acts_as_admin(self):
        assert role_of(_user(Role.VENDEDOR, is_superuser=True)) == Role.ADMIN

    def test_stored_role(self):
        assert role_of(_user(Role.FACTURADOR)) == Role.FACTURADOR


class TestCapabilities:
    @pytest.mark.parametrize("operation", list(Operation))
    def test_admin_may_do_everything(self, operation):
        assert is_allowed(_user(Role.ADMIN), operation)

    @pytest.mark.parametrize(
        "operation",
        [
            Operation.CREATE_CUSTOMER,
            Operation.CREATE_PRODUCT,
            Operation.ADJUST_STOCK,
            Operation.CREATE_ORDER,
        ],
    )
    def test_vendedor_capabilities(self, operation):
        assert is_allowed(_user(Role.VENDEDOR), operation)

    @pytest.mark.parametrize(
        "operation",
        [
            Operation.CHANGE_ORDER_STATUS,
            Operation.MARK_DELIVERED,
            Operation.NULLIFY_ORDER,
            Operation.UPDATE_ORDER,
        ],
    )
    def test_facturador_capabilities(self, operation):
        assert is_allowed(_user(Role.FACTURADOR), operation)

    def test_vendedor_cannot_change_status(self):
        assert not is_allowed(_user(Role.VENDEDOR), Operation.CHANGE_ORDER_STATUS)

    def test_facturador_cannot_create_orders(self):
        assert not is_allowed(_user(Role.FACTURADOR), Operation.CREATE_ORDER)

    @pytest.mark.parametrize("role", [Role.VENDEDOR, Role.FACTURADOR])
    def test_only_admin_replaces_and_deletes_orders(self, role):
        assert not is_allowed(_user(role), Operation.REPLACE_ORDER)
        assert not is_allowed(_user(role), Operation.DELETE_ORDER)


class TestEnsureAllowed:
    def test_denied_raises_generic_forbidden(self):
        with pytest.raises(Forbidden) as exc_info:
            ensure_allowed(_user(Role.VENDEDOR), Operation.DELETE_ORDER)
        assert "admin" not in str(exc_info.value)
        assert exc_info.value.status_code == 403

    def test_allowed_returns_none(self):
        assert ensure_allowed(_user(Role.ADMIN), Operation.MANAGE_USERS) is None
