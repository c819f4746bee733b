"""Shared plumbing for the event handler sets."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from portal_notifications.application.events import EventBus
from portal_notifications.application.notifications import NotificationStore
from portal_notifications.config import Settings
from portal_notifications.domain.entities import Notification, Profile, ProfileKind, User
from portal_notifications.domain.errors import InvalidEventPayload
from portal_notifications.infrastructure.channels import (
    EmailPayload,
    EmailService,
    SMSPayload,
    SMSService,
)
from portal_notifications.infrastructure.repositories import ProfileRegistry, UserRepository

logger = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    """Collaborators shared by every handler set."""

    store: NotificationStore
    email: EmailService
    sms: SMSService
    session_factory: async_sessionmaker[AsyncSession]
    profiles: ProfileRegistry
    settings: Settings


class EventHandlerSet:
    """Group of handlers for one business area.

    ``subscriptions`` maps event names to method names; :meth:`register`
    subscribes them on the bus in declaration order.
    """

    subscriptions: ClassVar[dict[str, str]] = {}

    def __init__(self, context: HandlerContext) -> None:
        self.context = context

    @property
    def settings(self) -> Settings:
        return self.context.settings

    def register(self, bus: EventBus) -> None:
        for event_name, method_name in self.subscriptions.items():
            bus.subscribe(event_name, getattr(self, method_name))

    @staticmethod
    def require(event_name: str, payload: Mapping[str, Any], *fields: str) -> None:
        """Raise :class:`InvalidEventPayload` when any of ``fields`` is empty."""

        missing = [name for name in fields if payload.get(name) in (None, "")]
        if missing:
            raise InvalidEventPayload(event_name, missing)

    async def load_user(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        async with self.context.session_factory() as session:
            return await UserRepository(session).get(str(user_id))

    async def load_users_with_role(self, role: str) -> list[User]:
        async with self.context.session_factory() as session:
            return list(await UserRepository(session).list_by_role(role))

    async def load_profile(self, kind: ProfileKind | str, profile_id: str | None) -> Profile | None:
        if not profile_id:
            return None
        async with self.context.session_factory() as session:
            return await self.context.profiles.get_profile(session, kind, str(profile_id))

    def notify(
        self,
        recipient_id: str,
        sender_id: str | None,
        title: str,
        message: str,
        notification_type: str,
        entity_id: str | None = None,
    ) -> Awaitable[Notification | None]:
        return self.context.store.insert(
            recipient_id, sender_id, title, message, notification_type, entity_id
        )

    def email(
        self,
        to: str | None,
        subject: str,
        *,
        html: str | None = None,
        template_id: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> Awaitable[None] | None:
        """Return the email send coroutine, or ``None`` when there is no address."""

        if not to:
            return None
        payload = EmailPayload(
            to=to, subject=subject, html=html, template_id=template_id, data=data or {}
        )
        return self.context.email.send(payload)

    def text_user(self, user: User | None, message: str) -> Awaitable[str] | None:
        """Return the SMS send coroutine, or ``None`` when the user cannot receive SMS."""

        if user is None:
            return None
        if not user.phone_number:
            logger.info("No phone number for user %s; SMS skipped", user.id)
            return None
        if not user.account_notification_sms:
            logger.info("User %s has SMS alerts disabled", user.id)
            return None
        return self.text(user.phone_number, message)

    def text(self, to: str, message: str) -> Awaitable[str]:
        data: dict[str, Any] = {}
        content_sid = self.settings.twilio_content_sid
        if content_sid:
            data = {"content_sid": content_sid, "content_variables": {"message": message}}
        return self.context.sms.send(SMSPayload(to=to, message=message, data=data))


__all__ = ["EventHandlerSet", "HandlerContext"]
