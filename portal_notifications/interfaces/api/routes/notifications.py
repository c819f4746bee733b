"""Inbox endpoints for the authenticated user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from portal_notifications.application.notifications import NotificationStore
from portal_notifications.domain.entities import Notification
from portal_notifications.interfaces.api.dependencies import (
    get_current_user_id,
    get_notification_store,
)
from portal_notifications.interfaces.api.schemas import (
    MarkReadResponse,
    NotificationMarkReadRequest,
    NotificationRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or "",
        recipient_id=notification.recipient_id,
        sender_id=notification.sender_id,
        title=notification.title,
        message=notification.message,
        notification_type=notification.notification_type,
        entity_id=notification.entity_id,
        opened=notification.opened,
        created_at=notification.created_at,
    )


@router.get("", response_model=list[NotificationRead])
async def list_notifications(
    unread_only: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    store: NotificationStore = Depends(get_notification_store),
) -> list[NotificationRead]:
    """Return the most recent notifications addressed to the user or any of its profiles."""

    notifications = await store.list_for_user(user_id, unread_only=unread_only, limit=limit)
    return [_notification_to_schema(notification) for notification in notifications]


@router.post("/read-all", response_model=MarkReadResponse)
async def mark_all_read(
    user_id: str = Depends(get_current_user_id),
    store: NotificationStore = Depends(get_notification_store),
) -> MarkReadResponse:
    return MarkReadResponse(updated=await store.mark_all_read(user_id))


@router.post("/read", response_model=MarkReadResponse)
async def mark_read(
    payload: NotificationMarkReadRequest,
    user_id: str = Depends(get_current_user_id),
    store: NotificationStore = Depends(get_notification_store),
) -> MarkReadResponse:
    return MarkReadResponse(updated=await store.mark_read(user_id, payload.unique_ids()))


__all__ = ["router"]
