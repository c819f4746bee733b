"""Persistence layer for role profiles."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import fields
from datetime import datetime
from typing import Any, ClassVar

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal_notifications.domain.entities import (
    AdminProfile,
    AgentProfile,
    AthleteProfile,
    Profile,
    ScoutProfile,
    TeamProfile,
)
from portal_notifications.infrastructure.models import (
    AdminProfileModel,
    AgentProfileModel,
    AthleteProfileModel,
    ScoutProfileModel,
    TeamProfileModel,
)
from portal_notifications.utils import ensure_app_naive_datetime, ensure_app_timezone

_DATETIME_FIELDS = {"created_at", "deactivated_at", "reactivated_at"}


class ProfileRepository:
    """Generic access to one profile table.

    Subclasses only bind ``model`` and ``entity``; columns and dataclass fields
    share names so conversion is driven by the entity definition.
    """

    model: ClassVar[type]
    entity: ClassVar[type[Profile]]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, profile_id: str) -> Profile | None:
        model = await self.session.get(self.model, profile_id)
        return self._to_entity(model) if model else None

    async def get_for_user(self, user_id: str) -> Profile | None:
        result = await self.session.scalars(
            select(self.model).where(self.model.user_id == user_id).limit(1)
        )
        model = result.first()
        return self._to_entity(model) if model else None

    async def ids_for_user(self, user_id: str) -> list[str]:
        result = await self.session.scalars(
            select(self.model.id).where(self.model.user_id == user_id)
        )
        return list(result.all())

    async def get_many(self, profile_ids: Iterable[str]) -> dict[str, Profile]:
        ids = {profile_id for profile_id in profile_ids if profile_id}
        if not ids:
            return {}
        result = await self.session.scalars(
            select(self.model).where(self.model.id.in_(ids))
        )
        return {model.id: self._to_entity(model) for model in result.all()}

    async def create(self, profile: Profile) -> Profile:
        model = self.model()
        for name, value in self._entity_values(profile).items():
            setattr(model, name, value)
        model.id = profile.id or str(uuid.uuid4())
        self.session.add(model)
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return self._to_entity(model)

    @classmethod
    def _entity_values(cls, profile: Profile) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for item in fields(cls.entity):
            value = getattr(profile, item.name)
            if item.name in _DATETIME_FIELDS:
                if value is None and item.name == "created_at":
                    continue
                value = ensure_app_naive_datetime(value)
            values[item.name] = value
        return values

    @classmethod
    def _to_entity(cls, model) -> Profile:
        values: dict[str, Any] = {}
        for item in fields(cls.entity):
            value = getattr(model, item.name)
            if item.name in _DATETIME_FIELDS:
                value = ensure_app_timezone(value)
            values[item.name] = value
        return cls.entity(**values)


class AthleteProfileRepository(ProfileRepository):
    """Athlete profiles, including the activation bookkeeping."""

    model = AthleteProfileModel
    entity = AthleteProfile

    async def list_active_created_before(self, cutoff: datetime) -> Sequence[AthleteProfile]:
        statement = (
            select(AthleteProfileModel)
            .where(
                AthleteProfileModel.is_active.is_(True),
                AthleteProfileModel.created_at < ensure_app_naive_datetime(cutoff),
            )
            .order_by(AthleteProfileModel.created_at)
        )
        result = await self.session.scalars(statement)
        return [self._to_entity(model) for model in result.all()]

    async def list_inactive(self) -> Sequence[AthleteProfile]:
        result = await self.session.scalars(
            select(AthleteProfileModel)
            .where(AthleteProfileModel.is_active.is_(False))
            .order_by(AthleteProfileModel.created_at)
        )
        return [self._to_entity(model) for model in result.all()]

    async def deactivate(self, profile_id: str, *, reason: str, at: datetime) -> bool:
        return await self._update_activation(
            profile_id,
            is_active=True,
            values={
                "is_active": False,
                "deactivated_at": ensure_app_naive_datetime(at),
                "deactivation_reason": reason,
            },
        )

    async def reactivate(self, profile_id: str, *, at: datetime) -> bool:
        return await self._update_activation(
            profile_id,
            is_active=False,
            values={
                "is_active": True,
                "reactivated_at": ensure_app_naive_datetime(at),
                "deactivated_at": None,
                "deactivation_reason": None,
            },
        )

    async def _update_activation(
        self, profile_id: str, *, is_active: bool, values: dict[str, Any]
    ) -> bool:
        statement = (
            update(AthleteProfileModel)
            .where(
                AthleteProfileModel.id == profile_id,
                AthleteProfileModel.is_active.is_(is_active),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return bool(result.rowcount)


class TeamProfileRepository(ProfileRepository):
    model = TeamProfileModel
    entity = TeamProfile


class ScoutProfileRepository(ProfileRepository):
    model = ScoutProfileModel
    entity = ScoutProfile


class AgentProfileRepository(ProfileRepository):
    model = AgentProfileModel
    entity = AgentProfile


class AdminProfileRepository(ProfileRepository):
    model = AdminProfileModel
    entity = AdminProfile

    async def list_by_role(self, role: str) -> Sequence[AdminProfile]:
        result = await self.session.scalars(
            select(AdminProfileModel)
            .where(AdminProfileModel.role == role)
            .order_by(AdminProfileModel.created_at)
        )
        return [self._to_entity(model) for model in result.all()]


__all__ = [
    "AdminProfileRepository",
    "AgentProfileRepository",
    "AthleteProfileRepository",
    "ProfileRepository",
    "ScoutProfileRepository",
    "TeamProfileRepository",
]
