"""Notification exceptions."""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFound


class NotificationFailure(DomainError):
    """An e-mail could not be delivered to the mail server."""

    status_code = 502
    code = "notification_failure"


class RecipientNotFound(NotFound):
    """The requested recipient does not exist."""


class RecipientAlreadyExists(DomainError):
    """Another recipient already uses this e-mail address."""

    status_code = 409
    code = "recipient_exists"
