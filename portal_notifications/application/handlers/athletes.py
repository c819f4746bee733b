"""Athlete profile reminders and profile view notices."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from portal_notifications.application.notifications import (
    CHANNEL_EMAIL,
    CHANNEL_NOTIFICATION,
    CHANNEL_SMS,
    HandlerReport,
    settle_all,
)
from portal_notifications.domain.entities import ProfileKind

from .base import EventHandlerSet
from .templates import PROFILE_INCOMPLETE_TEMPLATE, base_template_data, portal_link

logger = logging.getLogger(__name__)

PROFILE_COMPLETION_ALERT = "athlete.profile.completion.alert"
PROFILE_VIEW_RECORDED = "athlete.view.recorded"

PROFILE_VIEW_VISIBILITY_FEATURE = "profile_view_visibility"


class AthleteHandlers(EventHandlerSet):
    subscriptions = {
        PROFILE_COMPLETION_ALERT: "on_profile_completion_alert",
        PROFILE_VIEW_RECORDED: "on_profile_viewed",
    }

    async def on_profile_completion_alert(self, payload: Mapping[str, Any]) -> HandlerReport:
        """Remind an athlete to finish their profile by email and, if opted in, SMS."""

        self.require(PROFILE_COMPLETION_ALERT, payload, "athlete_profile_id")
        report = HandlerReport(PROFILE_COMPLETION_ALERT)
        athlete = await self.load_profile(ProfileKind.ATHLETE, payload["athlete_profile_id"])
        if athlete is None:
            logger.warning("Athlete profile %s not found", payload["athlete_profile_id"])
            report.skipped_reason = "athlete not found"
            return report

        user = await self.load_user(athlete.user_id)
        profile_url = portal_link(self.settings, f"athletes/{getattr(athlete, 'slug', None) or athlete.id}")
        subject = "Complete your FreeAgent Portal profile"
        report.add(
            *await settle_all(
                {
                    CHANNEL_EMAIL: self.email(
                        athlete.email or (user.email if user else None),
                        subject,
                        template_id=PROFILE_INCOMPLETE_TEMPLATE,
                        data={
                            **base_template_data(self.settings, subject),
                            "name": athlete.name,
                            "profileUrl": profile_url,
                        },
                    ),
                    CHANNEL_SMS: self.text_user(
                        user,
                        f"Hi {athlete.name}, teams can't find you until your profile is complete. "
                        f"Finish it here: {profile_url}",
                    ),
                },
                context=f"profile completion alert {athlete.id}",
            )
        )
        return report

    async def on_profile_viewed(self, payload: Mapping[str, Any]) -> HandlerReport:
        """Tell an athlete their profile was viewed.

        The viewer is named only when the athlete's plan carries the
        profile view visibility feature; otherwise the notice is generic.
        """

        self.require(PROFILE_VIEW_RECORDED, payload, "athlete_id", "viewer_id")
        report = HandlerReport(PROFILE_VIEW_RECORDED)
        athlete = await self.load_profile(ProfileKind.ATHLETE, payload["athlete_id"])
        if athlete is None:
            report.skipped_reason = "athlete not found"
            return report

        athlete_user = await self.load_user(athlete.user_id)
        viewer = await self.load_user(payload["viewer_id"])
        if (
            athlete_user is not None
            and athlete_user.has_feature(PROFILE_VIEW_VISIBILITY_FEATURE)
            and viewer is not None
        ):
            sender_id = viewer.id
            message = f"{viewer.full_name} viewed your profile."
        else:
            sender_id = None
            message = "Someone viewed your profile. Upgrade your plan to see who."

        report.add(
            *await settle_all(
                {
                    CHANNEL_NOTIFICATION: self.notify(
                        athlete.id,
                        sender_id,
                        "Profile View",
                        message,
                        "profile_view",
                        athlete.id,
                    )
                },
                context=f"profile view {athlete.id}",
            )
        )
        return report


__all__ = [
    "AthleteHandlers",
    "PROFILE_COMPLETION_ALERT",
    "PROFILE_VIEW_RECORDED",
    "PROFILE_VIEW_VISIBILITY_FEATURE",
]
