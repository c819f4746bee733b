"""Persistence layer for portal accounts."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal_notifications.domain.entities import User
from portal_notifications.infrastructure.models import UserModel, UserRoleModel
from portal_notifications.utils import ensure_app_naive_datetime, ensure_app_timezone


class UserRepository:
    """Read and create user accounts."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: str) -> User | None:
        model = await self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.scalars(
            select(UserModel).where(UserModel.email == email).limit(1)
        )
        model = result.first()
        return self._to_entity(model) if model else None

    async def get_map_by_ids(self, user_ids: Iterable[str]) -> dict[str, User]:
        ids = {user_id for user_id in user_ids if user_id}
        if not ids:
            return {}
        result = await self.session.scalars(
            select(UserModel).where(UserModel.id.in_(ids))
        )
        return {model.id: self._to_entity(model) for model in result.all()}

    async def list_by_role(self, role: str) -> Sequence[User]:
        """Return every account holding ``role``."""

        statement = (
            select(UserModel)
            .join(UserRoleModel, UserRoleModel.user_id == UserModel.id)
            .where(UserRoleModel.role == role.lower())
            .order_by(UserModel.created_at)
        )
        result = await self.session.scalars(statement)
        return [self._to_entity(model) for model in result.unique().all()]

    async def create(self, user: User) -> User:
        model = UserModel(id=user.id or str(uuid.uuid4()))
        model.email = user.email
        model.first_name = user.first_name
        model.last_name = user.last_name
        model.phone_number = user.phone_number
        model.account_notification_sms = user.account_notification_sms
        model.plan_features = list(user.plan_features)
        if user.created_at is not None:
            model.created_at = ensure_app_naive_datetime(user.created_at)
        model.role_links = [
            UserRoleModel(role=role)
            for role in dict.fromkeys(value.lower() for value in user.roles)
        ]
        self.session.add(model)
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        await self.session.refresh(model, attribute_names=["role_links"])
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            first_name=model.first_name or "",
            last_name=model.last_name or "",
            roles=[link.role for link in model.role_links],
            phone_number=model.phone_number,
            account_notification_sms=bool(model.account_notification_sms),
            plan_features=list(model.plan_features or []),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["UserRepository"]
