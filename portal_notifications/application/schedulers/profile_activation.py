"""Deactivate athlete profiles left empty and bring completed ones back."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from portal_notifications.infrastructure.repositories import AthleteProfileRepository
from portal_notifications.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)

DEACTIVATION_GRACE_PERIOD = timedelta(days=1)
DEACTIVATION_REASON = "Zero work completed after 24 hours"


@dataclass
class ActivationResult:
    success_count: int = 0
    error_count: int = 0
    total_processed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class ProfileActivationJob:
    """Toggle ``is_active`` on athlete profiles based on the work done on them.

    A profile counts as worked on once it has a profile image, metrics,
    measurements or a resume.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        grace_period: timedelta = DEACTIVATION_GRACE_PERIOD,
        reason: str = DEACTIVATION_REASON,
    ) -> None:
        self._session_factory = session_factory
        self.grace_period = grace_period
        self.reason = reason

    async def deactivate(self, now: datetime | None = None) -> ActivationResult:
        reference = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
        result = ActivationResult()
        async with self._session_factory() as session:
            repository = AthleteProfileRepository(session)
            candidates = [
                profile
                for profile in await repository.list_active_created_before(
                    reference - self.grace_period
                )
                if profile.has_zero_work()
            ]
            if not candidates:
                logger.info("No athlete profiles found for deactivation")
                return result

            logger.info("Found %s athlete profiles to deactivate", len(candidates))
            for profile in candidates:
                result.total_processed += 1
                try:
                    changed = await repository.deactivate(
                        profile.id, reason=self.reason, at=reference
                    )
                except SQLAlchemyError:
                    logger.exception("Failed to deactivate athlete profile %s", profile.id)
                    result.error_count += 1
                    continue
                if changed:
                    result.success_count += 1
                else:
                    logger.warning("Athlete profile %s was not active anymore", profile.id)
                    result.error_count += 1

        logger.info("Athlete profile deactivation completed: %s", result.as_dict())
        return result

    async def reactivate(self, now: datetime | None = None) -> ActivationResult:
        reference = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
        result = ActivationResult()
        async with self._session_factory() as session:
            repository = AthleteProfileRepository(session)
            candidates = [
                profile for profile in await repository.list_inactive() if profile.work_signals()
            ]
            if not candidates:
                logger.info("No athlete profiles found for reactivation")
                return result

            logger.info("Found %s athlete profiles to reactivate", len(candidates))
            for profile in candidates:
                result.total_processed += 1
                try:
                    changed = await repository.reactivate(profile.id, at=reference)
                except SQLAlchemyError:
                    logger.exception("Failed to reactivate athlete profile %s", profile.id)
                    result.error_count += 1
                    continue
                if changed:
                    logger.debug(
                        "Reactivated athlete profile %s (%s)",
                        profile.id,
                        ", ".join(profile.work_signals()),
                    )
                    result.success_count += 1
                else:
                    result.error_count += 1

        logger.info("Athlete profile reactivation completed: %s", result.as_dict())
        return result

    async def manage(self, now: datetime | None = None) -> dict[str, Any]:
        """Run deactivation then reactivation."""

        deactivation = await self.deactivate(now)
        reactivation = await self.reactivate(now)
        return {
            "deactivation": deactivation.as_dict(),
            "reactivation": reactivation.as_dict(),
        }


__all__ = [
    "ActivationResult",
    "DEACTIVATION_GRACE_PERIOD",
    "DEACTIVATION_REASON",
    "ProfileActivationJob",
]
