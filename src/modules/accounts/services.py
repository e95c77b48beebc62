"""User management service (admin only) and self-service password change."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

import structlog
from django.db import transaction
from django.utils.crypto import get_random_string

from modules.accounts.exceptions import (
    CannotDeactivateSelf,
    InvalidCurrentPassword,
    UserAlreadyExists,
    UserNotFound,
)
from modules.accounts.models import User
from modules.accounts.policy import Operation, ensure_allowed

if TYPE_CHECKING:
    from modules.accounts.dtos import (
        ChangePasswordDTO,
        CreateUserDTO,
        ResetPasswordDTO,
        UpdateUserDTO,
    )
    from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)

TEMPORARY_PASSWORD_LENGTH = 10
TEMPORARY_PASSWORD_CHARS = (
    "abcdefghijkmnpqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789!@#$%"
)


class UserService:
    """Application service for user administration.

    Receives an ``IUserRepository`` via constructor injection.
    """

    def __init__(self, repository: IUserRepository) -> None:
        self._repo = repository

    @transaction.atomic
    def create_user(self, dto: CreateUserDTO, actor: Any) -> User:
        """Raises ``UserAlreadyExists`` when username or email is taken."""
        ensure_allowed(actor, Operation.MANAGE_USERS)

        if self._repo.get_by_username(dto.username):
            raise UserAlreadyExists(
                "A user with this username already exists.", field="username"
            )
        if self._repo.get_by_email(dto.email):
            raise UserAlreadyExists("A user with this email already exists.")

        user = User(
            username=dto.username,
            email=dto.email.lower(),
            first_name=dto.first_name,
            last_name=dto.last_name,
            role=dto.role.value,
        )
        user.set_password(dto.password)
        user = self._repo.save(user)
        logger.info("user.created", user_id=user.pk, role=user.role)
        return user

    @transaction.atomic
    def update_user(self, id: str, dto: UpdateUserDTO, actor: Any) -> User:
        ensure_allowed(actor, Operation.MANAGE_USERS)

        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User {id} not found.")

        if dto.is_active is False and user.pk == actor.pk:
            raise CannotDeactivateSelf("You cannot deactivate your own account.")

        if dto.email is not None and dto.email.lower() != user.email.lower():
            existing = self._repo.get_by_email(dto.email)
            if existing and existing.pk != user.pk:
                raise UserAlreadyExists("A user with this email already exists.")
            user.email = dto.email.lower()

        for field in ("first_name", "last_name", "is_active"):
            value = getattr(dto, field)
            if value is not None:
                setattr(user, field, value)
        if dto.role is not None:
            user.role = dto.role.value

        user = self._repo.save(user)
        logger.info("user.updated", user_id=user.pk)
        return user

    @transaction.atomic
    def deactivate_user(self, id: str, actor: Any) -> None:
        ensure_allowed(actor, Operation.MANAGE_USERS)

        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User {id} not found.")
        if user.pk == actor.pk:
            raise CannotDeactivateSelf("You cannot deactivate your own account.")
        self._repo.delete(str(user.pk))

    @transaction.atomic
    def reset_password(
        self, id: str, dto: ResetPasswordDTO, actor: Any
    ) -> Tuple[User, Optional[str]]:
        """Set a new password for another user.

        Returns the user and, when ``dto.new_password`` was omitted, the
        generated temporary password so the administrator can hand it over.
        """
        ensure_allowed(actor, Operation.MANAGE_USERS)

        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User {id} not found.")

        generated = None
        password = dto.new_password
        if password is None:
            password = generated = get_random_string(
                TEMPORARY_PASSWORD_LENGTH, TEMPORARY_PASSWORD_CHARS
            )
        user.set_password(password)
        self._repo.save(user)
        logger.info(
            "user.password_reset",
            user_id=user.pk,
            reset_by=actor.pk,
            generated=generated is not None,
        )
        return user, generated

    @transaction.atomic
    def change_password(self, dto: ChangePasswordDTO, actor: Any) -> User:
        """Self-service change; any authenticated user, current password required."""
        if not actor.check_password(dto.current_password):
            logger.warning("user.password_change_rejected", user_id=actor.pk)
            raise InvalidCurrentPassword("The current password is incorrect.")
        actor.set_password(dto.new_password)
        self._repo.save(actor)
        logger.info("user.password_changed", user_id=actor.pk)
        return actor

    def get_user(self, id: str, actor: Any) -> User:
        ensure_allowed(actor, Operation.MANAGE_USERS)
        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User {id} not found.")
        return user

    def list_users(self, actor: Any, filters: Optional[Dict[str, Any]] = None):
        ensure_allowed(actor, Operation.MANAGE_USERS)
        return self._repo.list(filters)
