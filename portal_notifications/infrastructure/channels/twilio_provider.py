"""Twilio implementation of the SMS provider, calling the REST API with httpx."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from portal_notifications.config import Settings
from portal_notifications.domain.errors import ChannelConfigurationError, ChannelDeliveryError

from .sms import SMSPayload, SMSProvider

logger = logging.getLogger(__name__)

_OPTION_FIELDS = {
    "status_callback": "StatusCallback",
    "max_price": "MaxPrice",
    "validity_period": "ValidityPeriod",
    "messaging_service_sid": "MessagingServiceSid",
    "content_sid": "ContentSid",
}


class TwilioSMSProvider(SMSProvider):
    """Send SMS with the Twilio Messages API."""

    name = "twilio"

    def __init__(
        self,
        *,
        account_sid: str,
        auth_token: str,
        from_phone: str,
        base_url: str = "https://api.twilio.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not account_sid or not auth_token:
            raise ChannelConfigurationError(
                "Twilio credentials not configured. Set TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN."
            )
        if not from_phone:
            raise ChannelConfigurationError(
                "Twilio phone number not configured. Set TWILIO_FROM_PHONE."
            )
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_phone = from_phone
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwilioSMSProvider":
        return cls(
            account_sid=settings.twilio_account_sid or "",
            auth_token=settings.twilio_auth_token or "",
            from_phone=settings.twilio_from_phone or "",
            base_url=settings.twilio_api_base_url,
            timeout=settings.twilio_timeout_seconds,
        )

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/2010-04-01/Accounts/{self._account_sid}/Messages.json"

    def build_form(self, payload: SMSPayload) -> dict[str, Any]:
        form: dict[str, Any] = {"To": payload.to}
        if not payload.data.get("messaging_service_sid"):
            form["From"] = payload.sender or self._from_phone
        if payload.message:
            form["Body"] = payload.message
        for key, field_name in _OPTION_FIELDS.items():
            value = payload.data.get(key)
            if value not in (None, ""):
                form[field_name] = str(value)
        variables = payload.data.get("content_variables")
        if variables:
            form["ContentVariables"] = (
                variables if isinstance(variables, str) else json.dumps(variables)
            )
        return form

    async def send(self, payload: SMSPayload) -> str:
        form = self.build_form(payload)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint,
                    data=form,
                    auth=(self._account_sid, self._auth_token),
                )
        except httpx.HTTPError as exc:
            logger.error("Twilio request for %s failed: %s", payload.to, exc)
            raise ChannelDeliveryError(self.name, str(exc)) from exc

        if response.status_code < 200 or response.status_code >= 300:
            details = _describe_error(response)
            logger.error(
                "Twilio API error HTTP %s for %s: %s",
                response.status_code,
                payload.to,
                details,
            )
            raise ChannelDeliveryError(self.name, details, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError:
            body = {}
        message_sid = str(body.get("sid") or "")
        logger.info("Twilio accepted SMS to %s (sid=%s)", payload.to, message_sid or "-")
        return message_sid


def _describe_error(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(body, dict) and body.get("message"):
        code = body.get("code")
        return f"{code}: {body['message']}" if code else str(body["message"])
    return response.text[:300]


__all__ = ["TwilioSMSProvider"]
