"""User repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import User


class IUserRepository(IRepository["User"]):
    """Repository contract for application users."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[User]:
        """Retrieve a user by username."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by email (case-insensitive)."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Deactivate by ID; ``False`` when nothing matched."""
