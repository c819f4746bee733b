"""Profile claim notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from portal_notifications.application.notifications import (
    CHANNEL_EMAIL,
    HandlerReport,
    settle_all,
)
from portal_notifications.domain.entities import ProfileKind
from portal_notifications.infrastructure.repositories import AdminProfileRepository

from .base import EventHandlerSet
from .templates import CLAIM_CREATED_TEMPLATE, base_template_data

logger = logging.getLogger(__name__)

CLAIM_CREATED = "claim.created"
CLAIM_REVIEWER_ROLE = "developer"


class ClaimHandlers(EventHandlerSet):
    subscriptions = {CLAIM_CREATED: "on_claim_created"}

    async def on_claim_created(self, payload: Mapping[str, Any]) -> HandlerReport:
        """Confirm the claim to the requester and queue it for the reviewing admins."""

        self.require(CLAIM_CREATED, payload, "claim")
        claim: Mapping[str, Any] = payload["claim"]
        self.require(CLAIM_CREATED, claim, "id", "user_id", "profile_id", "claim_type")
        report = HandlerReport(CLAIM_CREATED)

        user = await self.load_user(claim["user_id"])
        profile = await self.load_profile(claim["claim_type"], claim["profile_id"])
        if user is None or profile is None:
            logger.warning(
                "User %s or %s profile %s not found for claim %s",
                claim["user_id"],
                claim["claim_type"],
                claim["profile_id"],
                claim["id"],
            )
            report.skipped_reason = "user or profile not found"
            return report

        async with self.context.session_factory() as session:
            reviewers = self.context.profiles.repository(ProfileKind.ADMIN, session)
            admins = (
                await reviewers.list_by_role(CLAIM_REVIEWER_ROLE)
                if isinstance(reviewers, AdminProfileRepository)
                else []
            )

        subject = "Your Claim Has Been Created Successfully"
        attempts: dict[str, Any] = {
            CHANNEL_EMAIL: self.email(
                user.email,
                subject,
                template_id=CLAIM_CREATED_TEMPLATE,
                data={
                    **base_template_data(self.settings, subject),
                    "name": user.full_name,
                    "profileImageUrl": getattr(profile, "profile_image_url", None)
                    or getattr(profile, "logo_url", None),
                    "profileName": profile.name,
                },
            )
        }
        for admin in admins:
            attempts[f"notification:{admin.id}"] = self.notify(
                admin.id,
                None,
                "New Claim Created",
                f"A new claim has been created by {user.first_name} ({user.email}).",
                CLAIM_CREATED,
                str(claim["id"]),
            )
        report.add(*await settle_all(attempts, context=f"claim {claim['id']}"))
        return report


__all__ = ["CLAIM_CREATED", "ClaimHandlers"]
