"""Scout report notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from portal_notifications.application.notifications import (
    CHANNEL_NOTIFICATION,
    HandlerReport,
    settle_all,
)
from portal_notifications.domain.entities import ProfileKind

from .base import EventHandlerSet

logger = logging.getLogger(__name__)

SCOUT_REPORT_SUBMITTED = "scout.report.submitted"


class ScoutHandlers(EventHandlerSet):
    subscriptions = {SCOUT_REPORT_SUBMITTED: "on_report_submitted"}

    async def on_report_submitted(self, payload: Mapping[str, Any]) -> HandlerReport:
        self.require(SCOUT_REPORT_SUBMITTED, payload, "report_id", "athlete_id")
        report = HandlerReport(SCOUT_REPORT_SUBMITTED)
        report_id = str(payload["report_id"])
        approved = bool(payload.get("is_approved"))

        scout = None
        if payload.get("scout_user_id"):
            async with self.context.session_factory() as session:
                scout = await self.context.profiles.repository(
                    ProfileKind.SCOUT, session
                ).get_for_user(str(payload["scout_user_id"]))

        attempts: dict[str, Any] = {
            f"{CHANNEL_NOTIFICATION}:athlete": self.notify(
                str(payload["athlete_id"]),
                None,
                "Scout Report Submitted",
                "You've been scouted! You're getting noticed by scouts!",
                "system",
                report_id,
            ),
            f"{CHANNEL_NOTIFICATION}:scout": None,
        }
        if scout is not None:
            outcome = "approved" if approved else "denied"
            attempts[f"{CHANNEL_NOTIFICATION}:scout"] = self.notify(
                scout.id,
                None,
                "Scout Report Processed",
                f"Your scout Report: {report_id} has been successfully processed, and was {outcome}.",
                "scout_report",
                report_id,
            )
        else:
            logger.info("No scout profile found for report %s", report_id)

        report.add(*await settle_all(attempts, context=f"scout report {report_id}"))
        return report


__all__ = ["SCOUT_REPORT_SUBMITTED", "ScoutHandlers"]
