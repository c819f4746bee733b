"""Saved search report notifications."""

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

SEARCH_REPORT_GENERATED = "search.report.generated"


class SearchReportHandlers(EventHandlerSet):
    subscriptions = {SEARCH_REPORT_GENERATED: "on_report_generated"}

    async def on_report_generated(self, payload: Mapping[str, Any]) -> HandlerReport:
        self.require(
            SEARCH_REPORT_GENERATED, payload, "owner_id", "owner_type", "report_id"
        )
        report = HandlerReport(SEARCH_REPORT_GENERATED)
        owner_type = str(payload["owner_type"])
        if not self.context.profiles.supports(owner_type):
            logger.warning("Unsupported search report owner type %s", owner_type)
            report.skipped_reason = f"unsupported owner type {owner_type}"
            return report

        owner = await self.load_profile(ProfileKind.parse(owner_type), payload["owner_id"])
        if owner is None:
            logger.warning("%s profile %s not found", owner_type, payload["owner_id"])
            report.skipped_reason = "owner not found"
            return report

        name = payload.get("search_preference_name") or "your saved search"
        count = int(payload.get("result_count") or 0)
        report.add(
            *await settle_all(
                {
                    CHANNEL_NOTIFICATION: self.notify(
                        owner.id,
                        None,
                        "New Search Report Available",
                        f'Your search report for "{name}" is ready with {count} results.',
                        "search.report",
                        str(payload["report_id"]),
                    )
                },
                context=f"search report {payload['report_id']}",
            )
        )
        return report


__all__ = ["SEARCH_REPORT_GENERATED", "SearchReportHandlers"]
