"""DRF exception handler for domain errors.

Translates ``DomainError`` subclasses and pydantic validation errors into
DRF exceptions, then delegates to ``drf-standardized-errors`` so every
failure is rendered as ``{"type": ..., "errors": [{"code", "detail",
"attr"}]}``.  Values from ``DomainError.details()`` are added to the error
entry (``days_elapsed`` on a premature nullification).
"""

from __future__ import annotations

from typing import Any, Dict, List

import structlog
from drf_standardized_errors.formatter import ExceptionFormatter
from drf_standardized_errors.handler import exception_handler
from drf_standardized_errors.types import ErrorResponse
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions, serializers
from rest_framework.exceptions import ErrorDetail

from modules.core.exceptions import DomainError

logger = structlog.get_logger(__name__)


class DomainAPIException(exceptions.APIException):
    """APIException carrying the status, code and details of a ``DomainError``."""

    def __init__(self, exc: DomainError) -> None:
        self.status_code = exc.status_code
        self.extra = exc.details()
        super().__init__(detail=str(exc), code=exc.code)


class DomainErrorFormatter(ExceptionFormatter):
    """Adds the ``DomainError.details()`` values to each error entry."""

    def format_error_response(self, error_response: ErrorResponse) -> Any:
        response = super().format_error_response(error_response)
        extra = getattr(self.exc, "extra", None)
        if extra:
            for error in response["errors"]:
                error.update(extra)
        return response


def _from_pydantic(exc: PydanticValidationError) -> serializers.ValidationError:
    details: Dict[str, List[ErrorDetail]] = {}
    for error in exc.errors():
        attr = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
        message = str(error["msg"]).removeprefix("Value error, ")
        details.setdefault(attr, []).append(ErrorDetail(message, code="invalid"))
    return serializers.ValidationError(details)


def domain_exception_handler(exc: Exception, context: Dict[str, Any]):
    if isinstance(exc, DomainError):
        logger.info(
            "api.domain_error",
            error=exc.__class__.__name__,
            code=exc.code,
            status_code=exc.status_code,
        )
        if exc.field and exc.status_code == 400:
            exc = serializers.ValidationError(
                {exc.field: [ErrorDetail(str(exc), code=exc.code)]}
            )
        else:
            exc = DomainAPIException(exc)
    elif isinstance(exc, PydanticValidationError):
        exc = _from_pydantic(exc)
    return exception_handler(exc, context)
