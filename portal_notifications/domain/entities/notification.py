"""Domain entity representing an in-app notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Notification:
    """Message shown in the portal inbox of a user or role profile."""

    id: str | None
    recipient_id: str
    sender_id: str | None
    title: str
    message: str
    notification_type: str
    entity_id: str | None = None
    opened: bool = False
    created_at: datetime | None = None

    def identity(self) -> tuple[str, str | None, str, str, str, str | None]:
        """Return the tuple used to collapse duplicate notifications."""

        return (
            self.recipient_id,
            self.sender_id,
            self.title,
            self.message,
            self.notification_type,
            self.entity_id,
        )


__all__ = ["Notification"]
