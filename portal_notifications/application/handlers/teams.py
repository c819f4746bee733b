"""Team invitation notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from portal_notifications.application.notifications import (
    CHANNEL_EMAIL,
    CHANNEL_NOTIFICATION,
    HandlerReport,
    settle_all,
)
from portal_notifications.domain.entities import ProfileKind

from .base import EventHandlerSet
from .templates import (
    TEAM_INVITE_EXPIRES_IN_HOURS,
    TEAM_INVITED_TEMPLATE,
    auth_link,
    base_template_data,
)

logger = logging.getLogger(__name__)

TEAM_INVITED = "team.invited"


class TeamHandlers(EventHandlerSet):
    subscriptions = {TEAM_INVITED: "on_team_invited"}

    async def on_team_invited(self, payload: Mapping[str, Any]) -> HandlerReport:
        self.require(TEAM_INVITED, payload, "team_profile_id", "invitation")
        invitation: Mapping[str, Any] = payload["invitation"]
        self.require(TEAM_INVITED, invitation, "email")
        report = HandlerReport(TEAM_INVITED)

        team = await self.load_profile(ProfileKind.TEAM, payload["team_profile_id"])
        if team is None:
            logger.warning("Team profile %s not found", payload["team_profile_id"])
            report.skipped_reason = "team not found"
            return report

        inviter = invitation.get("inviter_name") or "The FreeAgent Portal team"
        subject = f"You're invited to claim {team.name} on FreeAgent Portal"
        report.add(
            *await settle_all(
                {
                    CHANNEL_NOTIFICATION: self.notify(
                        team.id,
                        None,
                        "Team Invitation",
                        f"{inviter} invited {invitation['email']} to join {team.name}.",
                        TEAM_INVITED,
                        team.id,
                    ),
                    CHANNEL_EMAIL: self.email(
                        invitation["email"],
                        subject,
                        template_id=TEAM_INVITED_TEMPLATE,
                        data={
                            **base_template_data(self.settings, subject),
                            "inviteeName": invitation.get("invitee_name") or "",
                            "inviterName": inviter,
                            "teamName": team.name,
                            "message": invitation.get("message") or "",
                            "inviteUrl": auth_link(
                                self.settings,
                                "claim",
                                slug=getattr(team, "slug", None) or team.id,
                                type="team",
                            ),
                            "expiresInHours": TEAM_INVITE_EXPIRES_IN_HOURS,
                        },
                    ),
                },
                context=f"team invite {team.id}",
            )
        )
        return report


__all__ = ["TEAM_INVITED", "TeamHandlers"]
