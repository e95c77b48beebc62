"""Account and access-control exceptions."""

from __future__ import annotations

from modules.core.exceptions import DomainError, NotFound


class Forbidden(DomainError):
    """The acting user's role does not allow the requested operation."""

    status_code = 403
    code = "permission_denied"


class UserNotFound(NotFound):
    """The requested user does not exist."""


class UserAlreadyExists(DomainError):
    """Username or email already taken."""

    code = "user_already_exists"
    field = "email"


class CannotDeactivateSelf(DomainError):
    """An admin tried to deactivate their own account."""

    code = "cannot_deactivate_self"
    field = "is_active"


class InvalidCurrentPassword(DomainError):
    """The current password given for a password change is wrong."""

    code = "invalid_current_password"
    field = "current_password"
