"""SMTP implementation of the email provider, used with test inboxes and relays."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from portal_notifications.config import Settings
from portal_notifications.domain.errors import ChannelConfigurationError, ChannelDeliveryError

from .email import EmailPayload, EmailProvider

logger = logging.getLogger(__name__)


class SmtpEmailProvider(EmailProvider):
    """Send raw HTML email through an SMTP relay.

    Provider templates are a SendGrid feature; payloads that only carry a
    ``template_id`` are rendered as a plain summary of their data instead.
    """

    name = "smtp"

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = False,
        timeout: float = 30.0,
    ) -> None:
        if not host or not sender:
            raise ChannelConfigurationError(
                "SMTP_HOST and SMTP_SENDER are required for the smtp provider"
            )
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls or port == 465
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpEmailProvider":
        return cls(
            host=settings.smtp_host or "",
            port=settings.smtp_port,
            sender=settings.smtp_sender or settings.sendgrid_sender or "",
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )

    def build_message(self, payload: EmailPayload) -> EmailMessage:
        message = EmailMessage()
        message["From"] = payload.sender or self._sender
        message["To"] = payload.to
        message["Subject"] = payload.subject
        if payload.html:
            message.set_content(payload.html, subtype="html")
        else:
            lines = [f"<p><strong>{key}</strong>: {value}</p>" for key, value in payload.data.items()]
            message.set_content("".join(lines) or payload.subject, subtype="html")
        return message

    async def send(self, payload: EmailPayload) -> None:
        message = self.build_message(payload)
        smtp = aiosmtplib.SMTP(
            hostname=self._host,
            port=self._port,
            timeout=self._timeout,
            use_tls=self._use_tls,
        )
        try:
            await smtp.connect()
            if self._username and self._password:
                await smtp.login(self._username, self._password)
            await smtp.send_message(message)
        except aiosmtplib.SMTPResponseException as exc:
            logger.error("SMTP relay rejected message to %s: %s %s", payload.to, exc.code, exc.message)
            raise ChannelDeliveryError(self.name, exc.message, status_code=exc.code) from exc
        except aiosmtplib.SMTPException as exc:
            logger.error("SMTP delivery to %s failed: %s", payload.to, exc)
            raise ChannelDeliveryError(self.name, str(exc)) from exc
        finally:
            if smtp.is_connected:
                await smtp.quit()


__all__ = ["SmtpEmailProvider"]
