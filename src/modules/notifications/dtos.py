"""Notification DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UpdateConfigDTO(BaseModel):
    """Only supplied toggles change."""

    model_config = ConfigDict(frozen=True)

    enabled: Optional[bool] = None
    notify_on_order_create: Optional[bool] = None
    notify_on_status_change: Optional[bool] = None
    notify_on_delivery: Optional[bool] = None


class CreateRecipientDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    email: EmailStr
    name: str = Field(min_length=1, max_length=150)
    enabled: bool = True


class UpdateRecipientDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    email: Optional[EmailStr] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    enabled: Optional[bool] = None


class SendTestEmailDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    email: EmailStr
