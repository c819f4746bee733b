"""SendGrid implementation of the email provider."""

from __future__ import annotations

import json
import logging
from typing import Any

import anyio
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from portal_notifications.config import Settings
from portal_notifications.domain.errors import ChannelConfigurationError, ChannelDeliveryError

from .email import EmailPayload, EmailProvider

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages = [
                f"{item['message']} (field: {item['field']})"
                if item.get("field")
                else str(item["message"])
                for item in errors
                if isinstance(item, dict) and item.get("message")
            ]
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


class SendGridEmailProvider(EmailProvider):
    """Deliver email through the SendGrid v3 API, including dynamic templates."""

    name = "sendgrid"

    def __init__(self, api_key: str, default_sender: str) -> None:
        if not api_key or not default_sender:
            raise ChannelConfigurationError(
                "SENDGRID_API_KEY and SENDGRID_SENDER are required for the sendgrid provider"
            )
        self._api_key = api_key
        self._default_sender = default_sender

    @classmethod
    def from_settings(cls, settings: Settings) -> "SendGridEmailProvider":
        return cls(settings.sendgrid_api_key or "", settings.sendgrid_sender or "")

    def build_message(self, payload: EmailPayload) -> Mail:
        message = Mail(
            from_email=payload.sender or self._default_sender,
            to_emails=payload.to,
            subject=payload.subject,
            html_content=payload.html,
        )
        if payload.template_id:
            message.template_id = payload.template_id
            message.dynamic_template_data = {"subject": payload.subject, **payload.data}
        return message

    async def send(self, payload: EmailPayload) -> None:
        message = self.build_message(payload)
        client = SendGridAPIClient(self._api_key)
        try:
            response = await anyio.to_thread.run_sync(client.send, message)
        except Exception as exc:  # SDK raises python_http_client errors per status code
            status_code = getattr(exc, "status_code", None)
            details = _extract_sendgrid_error_details(getattr(exc, "body", None))
            logger.error(
                "SendGrid API request failed with status %s: %s",
                status_code,
                details or exc,
            )
            raise ChannelDeliveryError(
                self.name, details or str(exc), status_code=status_code
            ) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            details = _extract_sendgrid_error_details(getattr(response, "body", None))
            logger.error("SendGrid API responded with status %s: %s", status_code, details)
            raise ChannelDeliveryError(
                self.name,
                details or "unexpected response",
                status_code=status_code if isinstance(status_code, int) else None,
            )


__all__ = ["SendGridEmailProvider"]
