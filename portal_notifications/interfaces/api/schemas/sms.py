"""Pydantic models for the SMS utility endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class FormatPhoneRequest(BaseModel):
    phone_number: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("phone_number", "phoneNumber"),
    )
    country_code: str = Field(
        default="US",
        validation_alias=AliasChoices("country_code", "countryCode"),
    )


class FormatPhoneResponse(BaseModel):
    original: str
    formatted: str
    is_valid: bool
    country_code: str


class SMSHealth(BaseModel):
    provider: str | None
    configured: bool
    default_region: str


class SendSMSRequest(BaseModel):
    """Body of an administrator-issued text message."""

    to: str = Field(..., min_length=1)
    message: str | None = None
    sender: str | None = Field(default=None, validation_alias=AliasChoices("sender", "from"))
    data: dict[str, Any] = Field(default_factory=dict)


class SendSMSResponse(BaseModel):
    to: str
    message_id: str
    message_length: int


__all__ = [
    "FormatPhoneRequest",
    "FormatPhoneResponse",
    "SMSHealth",
    "SendSMSRequest",
    "SendSMSResponse",
]
