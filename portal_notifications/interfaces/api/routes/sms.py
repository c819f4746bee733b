"""SMS utility endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from portal_notifications.domain.entities import User
from portal_notifications.domain.errors import (
    ChannelConfigurationError,
    ChannelDeliveryError,
    ChannelValidationError,
)
from portal_notifications.infrastructure.channels import (
    SMSPayload,
    SMSService,
    format_phone_number,
    is_valid_phone_number,
)
from portal_notifications.interfaces.api.dependencies import get_current_admin, get_sms_service
from portal_notifications.interfaces.api.schemas import (
    FormatPhoneRequest,
    FormatPhoneResponse,
    SendSMSRequest,
    SendSMSResponse,
    SMSHealth,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications/sms", tags=["sms"])


@router.post("/format-phone", response_model=FormatPhoneResponse)
async def format_phone(payload: FormatPhoneRequest) -> FormatPhoneResponse:
    """Return the E.164 rendition of a phone number and whether it is usable."""

    formatted = format_phone_number(payload.phone_number, payload.country_code)
    return FormatPhoneResponse(
        original=payload.phone_number,
        formatted=formatted,
        is_valid=is_valid_phone_number(formatted),
        country_code=payload.country_code,
    )


@router.get("/health", response_model=SMSHealth)
async def sms_health(sms: SMSService = Depends(get_sms_service)) -> SMSHealth:
    return SMSHealth(
        provider=sms.provider.name if sms.provider else None,
        configured=sms.is_configured,
        default_region=sms.default_region,
    )


@router.post("/send", response_model=SendSMSResponse)
async def send_sms(
    payload: SendSMSRequest,
    sms: SMSService = Depends(get_sms_service),
    admin: User = Depends(get_current_admin),
) -> SendSMSResponse:
    """Send a text message on behalf of an administrator."""

    try:
        prepared = sms.prepare(
            SMSPayload(to=payload.to, message=payload.message, sender=payload.sender, data=payload.data)
        )
        message_id = await sms.send(prepared)
    except ChannelValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ChannelConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except ChannelDeliveryError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to send SMS: {exc}"
        ) from exc

    logger.info("Administrator %s sent an SMS to %s", admin.id, prepared.to)
    return SendSMSResponse(
        to=prepared.to,
        message_id=message_id,
        message_length=len(payload.message or ""),
    )


__all__ = ["router"]
