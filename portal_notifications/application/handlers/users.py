"""Account settings notifications."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from portal_notifications.application.notifications import (
    CHANNEL_NOTIFICATION,
    HandlerReport,
    settle_all,
)

from .base import EventHandlerSet

USER_PASSWORD_UPDATED = "user.password.updated"


class UserHandlers(EventHandlerSet):
    subscriptions = {USER_PASSWORD_UPDATED: "on_password_updated"}

    async def on_password_updated(self, payload: Mapping[str, Any]) -> HandlerReport:
        self.require(USER_PASSWORD_UPDATED, payload, "user_id")
        report = HandlerReport(USER_PASSWORD_UPDATED)
        user = await self.load_user(payload["user_id"])
        if user is None:
            report.skipped_reason = "user not found"
            return report

        report.add(
            *await settle_all(
                {
                    CHANNEL_NOTIFICATION: self.notify(
                        user.id,
                        None,
                        "Password Updated",
                        "Your password has been updated successfully.",
                        USER_PASSWORD_UPDATED,
                        user.id,
                    )
                }
            )
        )
        return report


__all__ = ["USER_PASSWORD_UPDATED", "UserHandlers"]
