"""Persistence helpers for notification entities."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import ColumnElement, delete, exists, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal_notifications.domain.entities import Notification
from portal_notifications.infrastructure.models import NotificationModel
from portal_notifications.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


def _matches(column, value) -> ColumnElement[bool]:
    """Compare ``column`` with ``value`` treating ``None`` as SQL ``NULL``."""

    if value is None:
        return column.is_(None)
    return column == value


def _identity_filter(notification: Notification) -> tuple[ColumnElement[bool], ...]:
    recipient_id, sender_id, title, message, notification_type, entity_id = (
        notification.identity()
    )
    return (
        NotificationModel.recipient_id == recipient_id,
        _matches(NotificationModel.sender_id, sender_id),
        NotificationModel.title == title,
        NotificationModel.message == message,
        NotificationModel.notification_type == notification_type,
        _matches(NotificationModel.entity_id, entity_id),
    )


class NotificationRepository:
    """Provide persistence operations for :class:`Notification` objects."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_recipients(
        self,
        recipient_ids: Iterable[str],
        *,
        unread_only: bool = False,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        ids = [recipient_id for recipient_id in recipient_ids if recipient_id]
        if not ids:
            return []
        statement = select(NotificationModel).where(
            NotificationModel.recipient_id.in_(ids)
        )
        if unread_only:
            statement = statement.where(NotificationModel.opened.is_(False))
        statement = statement.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            statement = statement.limit(limit)
        result = await self.session.scalars(statement)
        return [self._to_entity(model) for model in result.all()]

    async def replace(self, notification: Notification) -> Notification:
        """Delete records identical to ``notification`` and store it in one transaction."""

        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        try:
            await self.session.execute(
                delete(NotificationModel).where(*_identity_filter(notification))
            )
            self.session.add(model)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return self._to_entity(model)

    async def count_identical(self, notification: Notification) -> int:
        statement = (
            select(func.count())
            .select_from(NotificationModel)
            .where(*_identity_filter(notification))
        )
        return int(await self.session.scalar(statement) or 0)

    async def mark_opened_for_recipients(self, recipient_ids: Iterable[str]) -> int:
        ids = [recipient_id for recipient_id in recipient_ids if recipient_id]
        if not ids:
            return 0
        statement = (
            update(NotificationModel)
            .where(
                NotificationModel.recipient_id.in_(ids),
                NotificationModel.opened.is_(False),
            )
            .values(opened=True)
            .execution_options(synchronize_session=False)
        )
        return await self._execute_write(statement)

    async def mark_opened(
        self, notification_ids: Iterable[str], *, recipient_ids: Iterable[str]
    ) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id]
        recipients = [recipient_id for recipient_id in recipient_ids if recipient_id]
        if not ids or not recipients:
            return 0
        statement = (
            update(NotificationModel)
            .where(
                NotificationModel.id.in_(ids),
                NotificationModel.recipient_id.in_(recipients),
                NotificationModel.opened.is_(False),
            )
            .values(opened=True)
            .execution_options(synchronize_session=False)
        )
        return await self._execute_write(statement)

    async def exists_since(
        self,
        *,
        recipient_id: str,
        entity_id: str | None,
        notification_type: str,
        since: datetime,
    ) -> bool:
        statement = select(
            exists().where(
                NotificationModel.recipient_id == recipient_id,
                _matches(NotificationModel.entity_id, entity_id),
                NotificationModel.notification_type == notification_type,
                NotificationModel.created_at >= ensure_app_naive_datetime(since),
            )
        )
        return bool(await self.session.scalar(statement))

    async def delete_created_before(self, cutoff: datetime) -> int:
        statement = delete(NotificationModel).where(
            NotificationModel.created_at < ensure_app_naive_datetime(cutoff)
        )
        return await self._execute_write(statement)

    async def _execute_write(self, statement) -> int:
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return result.rowcount or 0

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, notification: Notification
    ) -> None:
        model.id = notification.id or str(uuid.uuid4())
        model.recipient_id = notification.recipient_id
        model.sender_id = notification.sender_id
        model.title = notification.title
        model.message = notification.message
        model.notification_type = notification.notification_type
        model.entity_id = notification.entity_id
        model.opened = notification.opened
        model.created_at = ensure_app_naive_datetime(
            notification.created_at or now_in_app_timezone()
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            sender_id=model.sender_id,
            title=model.title,
            message=model.message,
            notification_type=model.notification_type,
            entity_id=model.entity_id,
            opened=bool(model.opened),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
