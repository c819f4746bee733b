"""Pydantic models describing inbox notifications."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    recipient_id: str
    sender_id: str | None = None
    title: str
    message: str
    notification_type: str
    entity_id: str | None = None
    opened: bool = False
    created_at: datetime | None = None


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[str] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[str]:
        return list(dict.fromkeys(self.ids))


class MarkReadResponse(BaseModel):
    updated: int


__all__ = ["MarkReadResponse", "NotificationMarkReadRequest", "NotificationRead"]
