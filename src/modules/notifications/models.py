"""Notification settings and recipients.

``NotificationConfig`` is a singleton row (``singleton_key`` is always 1)
holding the global switch and the per-event toggles.  Recipients are
either system users (``user`` set) or extra addresses.
"""

from __future__ import annotations

from typing import Any, List

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import models, transaction
from django.db.models import Q

from modules.core.models import BaseModel


class NotificationConfig(BaseModel):
    singleton_key = models.PositiveSmallIntegerField(default=1, unique=True, editable=False)
    enabled = models.BooleanField(default=True)
    notify_on_order_create = models.BooleanField(default=True)
    notify_on_status_change = models.BooleanField(default=False)
    notify_on_delivery = models.BooleanField(default=False)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        db_table = "notification_config"

    @classmethod
    @transaction.atomic
    def load(cls) -> "NotificationConfig":
        """Return the configuration, creating it on first use.

        Every active user with an e-mail address who is not yet a recipient
        is registered as an enabled one.
        """
        config, _ = cls.objects.get_or_create(singleton_key=1)
        NotificationRecipient.sync_users()
        return config

    def __str__(self) -> str:
        return f"NotificationConfig(enabled={self.enabled})"


class RecipientKind(models.TextChoices):
    USER = "user", "User"
    EXTRA = "extra", "Extra"


class NotificationRecipient(BaseModel):
    kind = models.CharField(
        max_length=10, choices=RecipientKind.choices, default=RecipientKind.EXTRA
    )
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notification_recipient",
    )
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150)
    enabled = models.BooleanField(default=True)

    class Meta:
        db_table = "notification_recipients"
        ordering = ["kind", "name"]

    @classmethod
    def sync_users(cls) -> List["NotificationRecipient"]:
        """Add every active user with an e-mail address who is not yet a
        recipient.  Existing rows are left untouched, so a user row an
        administrator disabled stays disabled."""
        known_users = set(cls.objects.exclude(user=None).values_list("user_id", flat=True))
        known_emails = {e.lower() for e in cls.objects.values_list("email", flat=True)}
        added: List[NotificationRecipient] = []
        for user in get_user_model().objects.filter(is_active=True).exclude(email=""):
            if user.pk in known_users or user.email.lower() in known_emails:
                continue
            recipient, created = cls.objects.get_or_create(
                user=user,
                defaults={
                    "kind": RecipientKind.USER,
                    "email": user.email,
                    "name": user.display_name,
                },
            )
            if created:
                added.append(recipient)
            known_emails.add(user.email.lower())
        return added

    @classmethod
    def configured(cls) -> models.QuerySet:
        """Extra addresses plus rows of users who are still active."""
        return cls.objects.filter(Q(user__isnull=True) | Q(user__is_active=True))

    @classmethod
    def active(cls) -> List[Any]:
        return list(cls.configured().filter(enabled=True).order_by("kind", "name"))

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"
