"""Notification use-cases.

``NotificationService`` covers the administrator endpoints (settings,
recipients, test e-mail) and the order notifications sent by the event
handlers.  Order notifications never raise: the dispatcher logs and counts
failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.accounts.policy import Operation, ensure_allowed
from modules.notifications import emails
from modules.notifications.dispatcher import (
    DispatchSummary,
    NotificationDispatcher,
    Recipient,
    RenderedEmail,
)
from modules.notifications.exceptions import (
    NotificationFailure,
    RecipientAlreadyExists,
    RecipientNotFound,
)
from modules.notifications.models import (
    NotificationConfig,
    NotificationRecipient,
    RecipientKind,
)

if TYPE_CHECKING:
    from modules.notifications.dtos import (
        CreateRecipientDTO,
        UpdateConfigDTO,
        UpdateRecipientDTO,
    )
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)

_TOGGLES = (
    "enabled",
    "notify_on_order_create",
    "notify_on_status_change",
    "notify_on_delivery",
)


class NotificationService:
    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None) -> None:
        self._dispatcher = dispatcher or NotificationDispatcher()

    # ------------------------------------------------------------------
    # Configuration (administrators)
    # ------------------------------------------------------------------

    def get_config(self, actor: Any) -> NotificationConfig:
        ensure_allowed(actor, Operation.MANAGE_NOTIFICATIONS)
        return NotificationConfig.load()

    @transaction.atomic
    def update_config(self, dto: UpdateConfigDTO, actor: Any) -> NotificationConfig:
        ensure_allowed(actor, Operation.MANAGE_NOTIFICATIONS)
        config = NotificationConfig.load()
        for field in _TOGGLES:
            value = getattr(dto, field)
            if value is not None:
                setattr(config, field, value)
        config.updated_by = actor
        config.save()
        logger.info(
            "notification.config_updated",
            user_id=actor.pk,
            **{field: getattr(config, field) for field in _TOGGLES},
        )
        return config

    def list_recipients(self, actor: Any) -> List[NotificationRecipient]:
        ensure_allowed(actor, Operation.MANAGE_NOTIFICATIONS)
        NotificationConfig.load()
        return list(NotificationRecipient.configured().select_related("user"))

    @transaction.atomic
    def add_recipient(self, dto: CreateRecipientDTO, actor: Any) -> NotificationRecipient:
        ensure_allowed(actor, Operation.MANAGE_NOTIFICATIONS)
        self._ensure_unique_email(dto.email)
        recipient = NotificationRecipient.objects.create(
            kind=RecipientKind.EXTRA,
            email=dto.email,
            name=dto.name,
            enabled=dto.enabled,
        )
        logger.info("notification.recipient_added", recipient_id=str(recipient.id))
        return recipient

    @transaction.atomic
    def update_recipient(
        self, id: str, dto: UpdateRecipientDTO, actor: Any
    ) -> NotificationRecipient:
        ensure_allowed(actor, Operation.MANAGE_NOTIFICATIONS)
        recipient = self._get_recipient(id)
        if dto.email is not None and dto.email.lower() != recipient.email.lower():
            self._ensure_unique_email(dto.email, exclude_id=recipient.id)
            recipient.email = dto.email
        if dto.name is not None:
            recipient.name = dto.name
        if dto.enabled is not None:
            recipient.enabled = dto.enabled
        recipient.save()
        logger.info("notification.recipient_updated", recipient_id=str(recipient.id))
        return recipient

    @transaction.atomic
    def remove_recipient(self, id: str, actor: Any) -> None:
        ensure_allowed(actor, Operation.MANAGE_NOTIFICATIONS)
        recipient = self._get_recipient(id)
        recipient.delete()
        logger.info("notification.recipient_removed", recipient_id=str(id))

    def send_test_email(self, email: str, actor: Any) -> None:
        """Send the configuration check e-mail synchronously.

        Raises:
            Forbidden: actor is not an admin.
            NotificationFailure: the mail server rejected the message.
        """
        ensure_allowed(actor, Operation.MANAGE_NOTIFICATIONS)
        summary = self._dispatcher.dispatch(
            emails.configuration_check_email(),
            [Recipient(email=email, name=email)],
        )
        if summary.failed:
            raise NotificationFailure(f"Could not send the test e-mail to {email}.")

    # ------------------------------------------------------------------
    # Order notifications (event handlers)
    # ------------------------------------------------------------------

    def notify_order_created(self, order: Order) -> Optional[DispatchSummary]:
        return self._notify("notify_on_order_create", emails.order_created_email(order), order)

    def notify_status_changed(
        self, order: Order, old_status: str, new_status: str
    ) -> Optional[DispatchSummary]:
        return self._notify(
            "notify_on_status_change",
            emails.order_status_changed_email(order, old_status, new_status),
            order,
        )

    def notify_delivered(self, order: Order) -> Optional[DispatchSummary]:
        return self._notify("notify_on_delivery", emails.order_delivered_email(order), order)

    def _notify(
        self, toggle: str, email: RenderedEmail, order: Order
    ) -> Optional[DispatchSummary]:
        # Loading also registers users created since the last send.
        config = NotificationConfig.load()
        if not config.enabled or not getattr(config, toggle):
            logger.info(
                "notification.skipped",
                order_number=order.order_number,
                toggle=toggle,
            )
            return None
        configured = NotificationRecipient.configured().count()
        recipients = [
            Recipient(email=r.email, name=r.name) for r in NotificationRecipient.active()
        ]
        return self._dispatcher.dispatch(email, recipients, total_configured=configured)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_recipient(self, id: str) -> NotificationRecipient:
        try:
            recipient = NotificationRecipient.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            recipient = None
        if recipient is None:
            raise RecipientNotFound(f"Recipient {id} not found.")
        return recipient

    def _ensure_unique_email(self, email: str, exclude_id: Any = None) -> None:
        clash = NotificationRecipient.objects.filter(email__iexact=email)
        if exclude_id is not None:
            clash = clash.exclude(id=exclude_id)
        if clash.exists():
            raise RecipientAlreadyExists(f"{email} is already a recipient.")
