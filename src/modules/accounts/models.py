"""User model with a business role.

Roles:
- ``vendedor`` (sales): registers customers, products and orders.
- ``facturador`` (billing): drives orders through the status lifecycle.
- ``admin``: everything, including user and notification management.

Users are never hard-deleted; ``is_active=False`` disables the account.
"""

from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class Role(models.TextChoices):
    VENDEDOR = "vendedor", "Vendedor"
    FACTURADOR = "facturador", "Facturador"
    ADMIN = "admin", "Administrador"


class User(AbstractUser):
    """Application user.

    Superusers always act as ``admin`` regardless of the stored role
    (see ``modules.accounts.policy.role_of``).
    """

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.VENDEDOR,
    )

    class Meta:
        db_table = "users"
        ordering = ["-date_joined"]
        indexes = [
            models.Index(fields=["role"], name="users_role_idx"),
        ]

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"
