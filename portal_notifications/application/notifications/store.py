"""Notification store used by event handlers and alert jobs."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from portal_notifications.domain.entities import Notification
from portal_notifications.infrastructure.repositories import (
    NotificationRepository,
    ProfileRegistry,
    default_profile_registry,
)
from portal_notifications.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=60)


class NotificationStore:
    """Persist inbox notifications with replace-on-duplicate semantics."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        profiles: ProfileRegistry | None = None,
        retention: timedelta = DEFAULT_RETENTION,
    ) -> None:
        self._session_factory = session_factory
        self.profiles = profiles or default_profile_registry()
        self.retention = retention

    async def insert(
        self,
        recipient_id: str,
        sender_id: str | None,
        title: str,
        message: str,
        notification_type: str,
        entity_id: str | None = None,
    ) -> Notification | None:
        """Store a notification, replacing any identical one.

        Returns ``None`` when the write fails; the failure is logged and never
        raised so callers can keep delivering on other channels.
        """

        notification = Notification(
            id=None,
            recipient_id=recipient_id,
            sender_id=sender_id,
            title=title,
            message=message,
            notification_type=notification_type,
            entity_id=entity_id,
            opened=False,
            created_at=now_in_app_timezone(),
        )
        try:
            async with self._session_factory() as session:
                saved = await NotificationRepository(session).replace(notification)
        except Exception:
            logger.exception(
                "Failed to store %s notification for recipient %s (entity=%s)",
                notification_type,
                recipient_id,
                entity_id,
            )
            return None
        logger.debug(
            "Stored %s notification %s for recipient %s",
            notification_type,
            saved.id,
            recipient_id,
        )
        return saved

    async def recipient_ids_for_user(self, user_id: str) -> list[str]:
        """Return ``user_id`` together with every role profile id it owns."""

        async with self._session_factory() as session:
            profile_ids = await self.profiles.linked_profile_ids(session, user_id)
        return list(dict.fromkeys([user_id, *profile_ids]))

    async def mark_all_read(self, user_id: str) -> int:
        """Flip every unread notification addressed to the user or its profiles."""

        recipient_ids = await self.recipient_ids_for_user(user_id)
        async with self._session_factory() as session:
            updated = await NotificationRepository(session).mark_opened_for_recipients(
                recipient_ids
            )
        logger.info(
            "Marked %s notifications as read for user %s across %s recipients",
            updated,
            user_id,
            len(recipient_ids),
        )
        return updated

    async def mark_read(self, user_id: str, notification_ids: Iterable[str]) -> int:
        recipient_ids = await self.recipient_ids_for_user(user_id)
        async with self._session_factory() as session:
            return await NotificationRepository(session).mark_opened(
                notification_ids, recipient_ids=recipient_ids
            )

    async def list_for_user(
        self, user_id: str, *, unread_only: bool = False, limit: int | None = 50
    ) -> Sequence[Notification]:
        recipient_ids = await self.recipient_ids_for_user(user_id)
        async with self._session_factory() as session:
            return await NotificationRepository(session).list_for_recipients(
                recipient_ids, unread_only=unread_only, limit=limit
            )

    async def was_alerted_within(
        self,
        recipient_id: str,
        entity_id: str | None,
        notification_type: str,
        window: timedelta,
        *,
        now: datetime | None = None,
    ) -> bool:
        """Return ``True`` when a matching notification exists inside ``window``."""

        reference = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
        async with self._session_factory() as session:
            return await NotificationRepository(session).exists_since(
                recipient_id=recipient_id,
                entity_id=entity_id,
                notification_type=notification_type,
                since=reference - window,
            )

    async def count_identical(self, notification: Notification) -> int:
        async with self._session_factory() as session:
            return await NotificationRepository(session).count_identical(notification)

    async def purge_expired(self, now: datetime | None = None) -> int:
        """Delete notifications older than the retention window."""

        reference = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
        async with self._session_factory() as session:
            removed = await NotificationRepository(session).delete_created_before(
                reference - self.retention
            )
        if removed:
            logger.info("Purged %s notifications older than %s", removed, self.retention)
        return removed


__all__ = ["DEFAULT_RETENTION", "NotificationStore"]
