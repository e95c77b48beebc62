"""Django ORM implementation of the User repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.accounts.models import User
from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class UserDjangoRepository(IUserRepository):
    """Concrete User repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[User]:
        try:
            return User.objects.filter(pk=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None):
        queryset = User.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: User) -> User:
        is_new = entity._state.adding
        entity.save()
        logger.info("user.saved", user_id=entity.pk, is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Deactivate a user; accounts are never hard-deleted."""
        updated = User.objects.filter(pk=id).update(is_active=False)
        if updated:
            logger.info("user.deactivated", user_id=id)
        return bool(updated)

    def get_by_username(self, username: str) -> Optional[User]:
        return User.objects.filter(username=username).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return User.objects.filter(email__iexact=email).first()
