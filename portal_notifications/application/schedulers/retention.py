"""Daily sweep of expired inbox notifications."""

from __future__ import annotations

from datetime import datetime

from portal_notifications.application.notifications import NotificationStore


class NotificationRetentionJob:
    def __init__(self, store: NotificationStore) -> None:
        self.store = store

    async def run(self, now: datetime | None = None) -> dict[str, int]:
        removed = await self.store.purge_expired(now)
        return {"removed": removed}


__all__ = ["NotificationRetentionJob"]
