"""Lookup table from profile kind to the repository serving it."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from portal_notifications.domain.entities import Profile, ProfileKind

from .profile_repository import (
    AdminProfileRepository,
    AgentProfileRepository,
    AthleteProfileRepository,
    ProfileRepository,
    ScoutProfileRepository,
    TeamProfileRepository,
)

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[AsyncSession], ProfileRepository]


class ProfileRegistry:
    """Resolve profiles by kind and collect every profile owned by a user.

    New profile kinds are added at runtime with :meth:`register`; handlers and
    the notification store only talk to the registry, never to a concrete
    repository class.
    """

    def __init__(self, factories: dict[ProfileKind, RepositoryFactory] | None = None) -> None:
        self._factories: dict[ProfileKind, RepositoryFactory] = dict(factories or {})

    def register(self, kind: ProfileKind | str, factory: RepositoryFactory) -> None:
        resolved = ProfileKind.parse(kind)
        if resolved in self._factories:
            logger.info("Replacing repository registered for profile kind %s", resolved.value)
        self._factories[resolved] = factory

    def kinds(self) -> list[ProfileKind]:
        return list(self._factories)

    def supports(self, kind: ProfileKind | str) -> bool:
        try:
            return ProfileKind.parse(kind) in self._factories
        except ValueError:
            return False

    def repository(self, kind: ProfileKind | str, session: AsyncSession) -> ProfileRepository:
        resolved = ProfileKind.parse(kind)
        try:
            factory = self._factories[resolved]
        except KeyError as exc:
            raise LookupError(f"No repository registered for profile kind '{resolved.value}'") from exc
        return factory(session)

    async def get_profile(
        self, session: AsyncSession, kind: ProfileKind | str, profile_id: str
    ) -> Profile | None:
        return await self.repository(kind, session).get(profile_id)

    async def linked_profile_ids(
        self,
        session: AsyncSession,
        user_id: str,
        *,
        kinds: Iterable[ProfileKind] | None = None,
    ) -> list[str]:
        """Return the ids of every profile owned by ``user_id``."""

        profile_ids: list[str] = []
        for kind in kinds or self.kinds():
            profile_ids.extend(await self.repository(kind, session).ids_for_user(user_id))
        return profile_ids


def default_profile_registry() -> ProfileRegistry:
    """Return a registry covering the built-in profile kinds."""

    return ProfileRegistry(
        {
            ProfileKind.ATHLETE: AthleteProfileRepository,
            ProfileKind.TEAM: TeamProfileRepository,
            ProfileKind.SCOUT: ScoutProfileRepository,
            ProfileKind.AGENT: AgentProfileRepository,
            ProfileKind.ADMIN: AdminProfileRepository,
        }
    )


__all__ = ["ProfileRegistry", "RepositoryFactory", "default_profile_registry"]
