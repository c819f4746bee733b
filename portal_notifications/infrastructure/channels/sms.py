"""SMS channel: payload model, provider contract and validating service."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from portal_notifications.config import Settings, get_settings
from portal_notifications.domain.errors import (
    ChannelConfigurationError,
    ChannelValidationError,
)

from .phone import format_phone_number, is_valid_phone_number

logger = logging.getLogger(__name__)

MAX_SMS_LENGTH = 1600


@dataclass
class SMSPayload:
    """Text message to deliver.

    ``data`` carries provider options: ``content_sid``, ``content_variables``,
    ``messaging_service_sid``, ``status_callback``, ``max_price`` and
    ``validity_period``.
    """

    to: str
    message: str | None = None
    sender: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def uses_template(self) -> bool:
        return bool(self.data.get("content_sid") or self.data.get("messaging_service_sid"))


class SMSProvider(ABC):
    """Outbound adapter able to deliver an :class:`SMSPayload`."""

    name: str = "sms"

    @abstractmethod
    async def send(self, payload: SMSPayload) -> str:
        """Deliver ``payload`` and return the provider message id."""


class SMSService:
    """Validate SMS payloads and hand them to the configured provider."""

    def __init__(self, provider: SMSProvider | None = None, *, default_region: str = "US") -> None:
        self._provider = provider
        self.default_region = default_region

    @property
    def provider(self) -> SMSProvider | None:
        return self._provider

    @property
    def is_configured(self) -> bool:
        return self._provider is not None

    def configure(
        self,
        provider: SMSProvider | str,
        settings: Settings | None = None,
    ) -> SMSProvider:
        if self._provider is not None:
            raise ChannelConfigurationError(
                f"SMS provider already configured as '{self._provider.name}'"
            )
        settings = settings or get_settings()
        if isinstance(provider, str):
            provider = build_sms_provider(provider, settings)
        self._provider = provider
        self.default_region = settings.default_phone_region
        logger.info("SMS channel configured with provider %s", provider.name)
        return provider

    def prepare(self, payload: SMSPayload) -> SMSPayload:
        """Return ``payload`` with a normalised destination, or raise if it is unusable."""

        if not payload.to or not payload.to.strip():
            raise ChannelValidationError("SMS destination phone number is required")

        message = payload.message or ""
        if not message.strip() and not payload.uses_template:
            raise ChannelValidationError("SMS message content cannot be empty")
        if len(message) > MAX_SMS_LENGTH:
            raise ChannelValidationError(
                f"SMS message too long: {len(message)} characters (max {MAX_SMS_LENGTH})"
            )

        destination = payload.to.strip()
        if not is_valid_phone_number(destination):
            destination = format_phone_number(destination, self.default_region)
            if not is_valid_phone_number(destination):
                raise ChannelValidationError(
                    f"Invalid phone number format: {payload.to}. "
                    "Phone number must be in E.164 format (e.g., +1234567890)."
                )

        return SMSPayload(
            to=destination,
            message=payload.message,
            sender=payload.sender,
            data=dict(payload.data),
        )

    async def send(self, payload: SMSPayload) -> str:
        if self._provider is None:
            raise ChannelConfigurationError("SMS provider not initialized")
        prepared = self.prepare(payload)
        try:
            message_id = await self._provider.send(prepared)
        except Exception:
            logger.error("SMS to %s via %s failed", prepared.to, self._provider.name)
            raise
        logger.info(
            "SMS sent to %s via %s (message_id=%s)",
            prepared.to,
            self._provider.name,
            message_id,
        )
        return message_id


def build_sms_provider(name: str, settings: Settings | None = None) -> SMSProvider:
    """Instantiate the SMS provider registered under ``name``."""

    settings = settings or get_settings()
    normalized = (name or "").strip().lower()
    if normalized == "twilio":
        from .twilio_provider import TwilioSMSProvider

        return TwilioSMSProvider.from_settings(settings)
    if normalized == "console":
        from .console import ConsoleSMSProvider

        return ConsoleSMSProvider()
    raise ChannelConfigurationError(f"Unknown SMS provider: {name}")


__all__ = [
    "MAX_SMS_LENGTH",
    "SMSPayload",
    "SMSProvider",
    "SMSService",
    "build_sms_provider",
]
