"""Base class for business rule violations raised by the service layer.

Each module declares its own exceptions (``OrderNotFound``,
``InvalidTransition`` ...) as subclasses of ``DomainError``.  Services
never know about HTTP; ``status_code`` and ``code`` are only read by
``modules.core.exception_handler``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DomainError(Exception):
    """A business rule was violated."""

    status_code: int = 400
    code: str = "domain_error"
    # When set, the error is rendered as a validation error on this field.
    field: Optional[str] = None

    def __init__(self, message: str = "", *, field: Optional[str] = None) -> None:
        super().__init__(message)
        if field is not None:
            self.field = field

    def details(self) -> Dict[str, Any]:
        """Machine-readable values added to the rendered error entry."""
        return {}


class NotFound(DomainError):
    """A referenced aggregate does not exist."""

    status_code = 404
    code = "not_found"
