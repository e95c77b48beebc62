"""Unit tests for UserService."""

import pytest

from modules.accounts.dtos import (
    ChangePasswordDTO,
    CreateUserDTO,
    ResetPasswordDTO,
    UpdateUserDTO,
)
from modules.accounts.exceptions import (
    CannotDeactivateSelf,
    Forbidden,
    InvalidCurrentPassword,
    UserAlreadyExists,
    UserNotFound,
)
from modules.accounts.models import Role, User
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.services import UserService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return UserService(repository=UserDjangoRepository())


def _create_dto(**overrides):
    data = {
        "username": "nuevo",
        "email": "Nuevo@Empresa.cl",
        "password": "secreto1",
        "role": "facturador",
    }
    data.update(overrides)
    return CreateUserDTO(**data)


class TestCreateUser:
    def test_admin_creates_user(self, service, admin_user):
        user = service.create_user(_create_dto(), admin_user)

        assert user.role == Role.FACTURADOR
        assert user.email == "nuevo@empresa.cl"
        assert user.check_password("secreto1")

    def test_duplicate_username(self, service, admin_user, vendedor):
        with pytest.raises(UserAlreadyExists) as exc_info:
            service.create_user(_create_dto(username="vendedor"), admin_user)
        assert exc_info.value.field == "username"

    def test_duplicate_email(self, service, admin_user, vendedor):
        with pytest.raises(UserAlreadyExists) as exc_info:
            service.create_user(_create_dto(email=vendedor.email), admin_user)
        assert exc_info.value.field == "email"

    @pytest.mark.parametrize("actor", ["vendedor", "facturador"])
    def test_non_admin_forbidden(self, service, request, actor):
        with pytest.raises(Forbidden):
            service.create_user(_create_dto(), request.getfixturevalue(actor))


class TestUpdateUser:
    def test_change_role(self, service, admin_user, vendedor):
        user = service.update_user(
            str(vendedor.pk), UpdateUserDTO(role="facturador"), admin_user
        )
        assert user.role == Role.FACTURADOR

    def test_cannot_deactivate_self(self, service, admin_user):
        with pytest.raises(CannotDeactivateSelf):
            service.update_user(
                str(admin_user.pk), UpdateUserDTO(is_active=False), admin_user
            )

    def test_unknown_user(self, service, admin_user):
        with pytest.raises(UserNotFound):
            service.update_user("999999", UpdateUserDTO(first_name="X"), admin_user)


class TestDeactivateUser:
    def test_deactivated_not_deleted(self, service, admin_user, vendedor):
        service.deactivate_user(str(vendedor.pk), admin_user)

        vendedor.refresh_from_db()
        assert vendedor.is_active is False
        assert User.objects.filter(pk=vendedor.pk).exists()

    def test_cannot_deactivate_self(self, service, admin_user):
        with pytest.raises(CannotDeactivateSelf):
            service.deactivate_user(str(admin_user.pk), admin_user)


class TestPasswords:
    def test_reset_with_given_password(self, service, admin_user, vendedor):
        user, generated = service.reset_password(
            str(vendedor.pk), ResetPasswordDTO(new_password="nueva123"), admin_user
        )

        assert generated is None
        assert User.objects.get(pk=user.pk).check_password("nueva123")

    def test_reset_generates_temporary_password(self, service, admin_user, vendedor):
        _, generated = service.reset_password(
            str(vendedor.pk), ResetPasswordDTO(), admin_user
        )

        assert len(generated) == 10
        assert User.objects.get(pk=vendedor.pk).check_password(generated)

    def test_reset_requires_admin(self, service, facturador, vendedor):
        with pytest.raises(Forbidden):
            service.reset_password(str(vendedor.pk), ResetPasswordDTO(), facturador)

    def test_reset_unknown_user(self, service, admin_user):
        with pytest.raises(UserNotFound):
            service.reset_password("999999", ResetPasswordDTO(), admin_user)

    def test_change_own_password(self, service, vendedor):
        service.change_password(
            ChangePasswordDTO(current_password="pass12345", new_password="otra-clave"),
            vendedor,
        )
        assert User.objects.get(pk=vendedor.pk).check_password("otra-clave")

    def test_wrong_current_password(self, service, vendedor):
        with pytest.raises(InvalidCurrentPassword) as exc_info:
            service.change_password(
                ChangePasswordDTO(current_password="nope", new_password="otra-clave"),
                vendedor,
            )

        assert exc_info.value.field == "current_password"
        assert User.objects.get(pk=vendedor.pk).check_password("pass12345")
