"""Customer DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateCustomerDTO``: input for customer creation.
- ``UpdateCustomerDTO``: partial update, only supplied fields change.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from modules.customers.models import is_valid_rut, normalize_tax_id


def _check_tax_id(value: Any) -> Any:
    if value is None or not isinstance(value, str):
        return value
    value = normalize_tax_id(value)
    if value and not is_valid_rut(value):
        raise ValueError("Invalid RUT format (expected 12345678-9 or 12.345.678-K).")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CreateCustomerDTO(BaseModel):
    """Immutable DTO for customer creation requests.

    ``tax_id`` accepts both ``12345678-9`` and ``12.345.678-K``; the check
    digit is upper-cased.  Empty strings for ``tax_id``/``email`` mean
    "not provided".
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    tax_id: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    phone: str = Field(default="", max_length=15)
    street: str = ""
    city: str = ""
    region: str = ""
    postal_code: str = ""
    notes: str = Field(default="", max_length=500)

    @field_validator("tax_id", "email", mode="before")
    @classmethod
    def blank_as_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("tax_id")
    @classmethod
    def validate_tax_id(cls, v: str | None) -> str | None:
        return _check_tax_id(v)


class UpdateCustomerDTO(BaseModel):
    """Immutable DTO for customer update requests.

    All fields are optional; only supplied fields will be updated.  A blank
    ``tax_id`` or ``email`` clears the stored value.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    tax_id: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=15)
    street: str | None = None
    city: str | None = None
    region: str | None = None
    postal_code: str | None = None
    notes: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None

    @field_validator("tax_id", "email", mode="before")
    @classmethod
    def blank_as_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("tax_id")
    @classmethod
    def validate_tax_id(cls, v: str | None) -> str | None:
        return _check_tax_id(v)
