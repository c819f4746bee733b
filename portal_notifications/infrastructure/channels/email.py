"""Email channel: payload model, provider contract and the startup-configured service."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from portal_notifications.config import Settings, get_settings
from portal_notifications.domain.errors import ChannelConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class EmailPayload:
    """Email to deliver, either as raw HTML or as a provider template."""

    to: str
    subject: str
    html: str | None = None
    template_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    sender: str | None = None


class EmailProvider(ABC):
    """Outbound adapter able to deliver an :class:`EmailPayload`."""

    name: str = "email"

    @abstractmethod
    async def send(self, payload: EmailPayload) -> None:
        """Deliver ``payload`` or raise :class:`ChannelDeliveryError`."""


class EmailService:
    """Single entry point used by handlers to send email.

    The provider is chosen once, at startup, through :meth:`configure`.
    """

    def __init__(self, provider: EmailProvider | None = None) -> None:
        self._provider = provider

    @property
    def provider(self) -> EmailProvider | None:
        return self._provider

    @property
    def is_configured(self) -> bool:
        return self._provider is not None

    def configure(
        self,
        provider: EmailProvider | str,
        settings: Settings | None = None,
    ) -> EmailProvider:
        """Install the provider used for every subsequent :meth:`send`."""

        if self._provider is not None:
            raise ChannelConfigurationError(
                f"Email provider already configured as '{self._provider.name}'"
            )
        if isinstance(provider, str):
            provider = build_email_provider(provider, settings)
        self._provider = provider
        logger.info("Email channel configured with provider %s", provider.name)
        return provider

    async def send(self, payload: EmailPayload) -> None:
        if self._provider is None:
            raise ChannelConfigurationError("Email provider not initialized")
        if not payload.html and not payload.template_id:
            raise ChannelConfigurationError(
                "Email payload requires either html content or a template id"
            )
        await self._provider.send(payload)
        logger.info(
            "Email sent to %s via %s (subject=%r, template=%s)",
            payload.to,
            self._provider.name,
            payload.subject,
            payload.template_id or "-",
        )


def build_email_provider(name: str, settings: Settings | None = None) -> EmailProvider:
    """Instantiate the email provider registered under ``name``."""

    settings = settings or get_settings()
    normalized = (name or "").strip().lower()
    if normalized == "sendgrid":
        from .sendgrid_provider import SendGridEmailProvider

        return SendGridEmailProvider.from_settings(settings)
    if normalized == "smtp":
        from .smtp_provider import SmtpEmailProvider

        return SmtpEmailProvider.from_settings(settings)
    if normalized == "console":
        from .console import ConsoleEmailProvider

        return ConsoleEmailProvider()
    raise ChannelConfigurationError(f"Unknown email provider: {name}")


__all__ = ["EmailPayload", "EmailProvider", "EmailService", "build_email_provider"]
