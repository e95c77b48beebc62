"""User DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RoleEnum(StrEnum):
    VENDEDOR = "vendedor"
    FACTURADOR = "facturador"
    ADMIN = "admin"


class CreateUserDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str = Field(min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str = ""
    last_name: str = ""
    role: RoleEnum = RoleEnum.VENDEDOR


class UpdateUserDTO(BaseModel):
    """Only supplied (non-``None``) fields are updated."""

    model_config = ConfigDict(frozen=True)

    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: RoleEnum | None = None
    is_active: bool | None = None


class ResetPasswordDTO(BaseModel):
    """Admin reset.  Without ``new_password`` a temporary one is generated."""

    model_config = ConfigDict(frozen=True)

    new_password: str | None = Field(default=None, min_length=6)


class ChangePasswordDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)
