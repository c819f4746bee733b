"""Console providers that log messages instead of delivering them.

They keep every message in memory so local runs and tests can inspect what
would have been sent.
"""

from __future__ import annotations

import logging

from portal_notifications.domain.errors import ChannelDeliveryError

from .email import EmailPayload, EmailProvider
from .sms import SMSPayload, SMSProvider

logger = logging.getLogger(__name__)


class ConsoleEmailProvider(EmailProvider):
    name = "console"

    def __init__(self) -> None:
        self.sent_messages: list[EmailPayload] = []
        self._should_fail = False

    def configure(self, *, should_fail: bool) -> None:
        self._should_fail = should_fail

    async def send(self, payload: EmailPayload) -> None:
        if self._should_fail:
            raise ChannelDeliveryError(self.name, f"simulated failure for {payload.to}")
        self.sent_messages.append(payload)
        logger.info(
            "[EMAIL] to=%s subject=%r template=%s",
            payload.to,
            payload.subject,
            payload.template_id or "-",
        )


class ConsoleSMSProvider(SMSProvider):
    name = "console"

    def __init__(self) -> None:
        self.sent_messages: list[SMSPayload] = []
        self._should_fail = False

    def configure(self, *, should_fail: bool) -> None:
        self._should_fail = should_fail

    async def send(self, payload: SMSPayload) -> str:
        if self._should_fail:
            raise ChannelDeliveryError(self.name, f"simulated failure for {payload.to}")
        self.sent_messages.append(payload)
        logger.info("[SMS] to=%s message=%r", payload.to, payload.message)
        return f"console-{len(self.sent_messages)}"


__all__ = ["ConsoleEmailProvider", "ConsoleSMSProvider"]
