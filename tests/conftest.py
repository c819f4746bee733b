"""Shared fixtures: a throwaway SQLite database and console channel providers."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from portal_notifications.application.events import EventBus
from portal_notifications.application.handlers import (
    HandlerContext,
    register_notification_handlers,
)
from portal_notifications.application.notifications import NotificationStore
from portal_notifications.config import Settings
from portal_notifications.domain.entities import (
    AdminProfile,
    AthleteProfile,
    Conversation,
    Message,
    ScoutProfile,
    TeamProfile,
    User,
)
from portal_notifications.infrastructure.channels import (
    ConsoleEmailProvider,
    ConsoleSMSProvider,
    EmailService,
    SMSService,
)
from portal_notifications.infrastructure.database import (
    build_engine,
    build_session_factory,
    initialize_database,
)
from portal_notifications.infrastructure.repositories import (
    AdminProfileRepository,
    AthleteProfileRepository,
    ConversationRepository,
    ScoutProfileRepository,
    TeamProfileRepository,
    UserRepository,
    default_profile_registry,
)
from portal_notifications.utils import now_in_app_timezone


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'notifications.db'}",
        "email_provider": "console",
        "sms_provider": "console",
        "sendgrid_api_key": None,
        "sendgrid_sender": None,
        "scheduler_enabled": False,
        "handler_timeout_seconds": 5,
        "portal_base_url": "https://portal.test",
        "auth_base_url": "https://auth.portal.test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
async def session_factory(settings: Settings):
    engine = build_engine(settings)
    await initialize_database(engine)
    try:
        yield build_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def email_provider() -> ConsoleEmailProvider:
    return ConsoleEmailProvider()


@pytest.fixture
def sms_provider() -> ConsoleSMSProvider:
    return ConsoleSMSProvider()


@pytest.fixture
def store(session_factory) -> NotificationStore:
    return NotificationStore(session_factory, profiles=default_profile_registry())


@pytest.fixture
def context(session_factory, store, email_provider, sms_provider, settings) -> HandlerContext:
    return HandlerContext(
        store=store,
        email=EmailService(email_provider),
        sms=SMSService(sms_provider),
        session_factory=session_factory,
        profiles=store.profiles,
        settings=settings,
    )


@pytest.fixture
def bus(context: HandlerContext) -> EventBus:
    event_bus = EventBus(handler_timeout=5)
    register_notification_handlers(event_bus, context)
    return event_bus


class Seeder:
    """Insert users, profiles and messages through the repositories."""

    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory

    async def user(self, **values: Any) -> User:
        suffix = uuid.uuid4().hex[:8]
        defaults: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "email": f"user-{suffix}@example.com",
            "first_name": "Test",
            "last_name": f"User {suffix}",
        }
        defaults.update(values)
        async with self._session_factory() as session:
            return await UserRepository(session).create(User(**defaults))

    async def athlete(self, user: User, **values: Any) -> AthleteProfile:
        defaults: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "user_id": user.id,
            "name": user.full_name,
            "email": user.email,
        }
        defaults.update(values)
        async with self._session_factory() as session:
            return await AthleteProfileRepository(session).create(AthleteProfile(**defaults))

    async def team(self, user: User, **values: Any) -> TeamProfile:
        defaults: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "user_id": user.id,
            "name": "Harbor City FC",
            "slug": "harbor-city-fc",
        }
        defaults.update(values)
        async with self._session_factory() as session:
            return await TeamProfileRepository(session).create(TeamProfile(**defaults))

    async def scout(self, user: User, **values: Any) -> ScoutProfile:
        defaults: dict[str, Any] = {"id": str(uuid.uuid4()), "user_id": user.id, "name": "Scout"}
        defaults.update(values)
        async with self._session_factory() as session:
            return await ScoutProfileRepository(session).create(ScoutProfile(**defaults))

    async def admin(self, user: User, **values: Any) -> AdminProfile:
        defaults: dict[str, Any] = {"id": str(uuid.uuid4()), "user_id": user.id, "name": "Admin"}
        defaults.update(values)
        async with self._session_factory() as session:
            return await AdminProfileRepository(session).create(AdminProfile(**defaults))

    async def conversation(self, athlete: AthleteProfile, team: TeamProfile, **values: Any) -> Conversation:
        defaults: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "athlete_profile_id": athlete.id,
            "team_profile_id": team.id,
        }
        defaults.update(values)
        async with self._session_factory() as session:
            return await ConversationRepository(session).create_conversation(Conversation(**defaults))

    async def message_to_athlete(
        self,
        conversation: Conversation,
        *,
        age: timedelta = timedelta(hours=3),
        **values: Any,
    ) -> Message:
        created_at: datetime = now_in_app_timezone() - age
        defaults: dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "conversation_id": conversation.id,
            "sender_profile_id": conversation.team_profile_id,
            "sender_role": "team",
            "receiver_profile_id": conversation.athlete_profile_id,
            "receiver_role": "athlete",
            "content": "We'd like to invite you to our summer tryouts next week.",
            "created_at": created_at,
        }
        defaults.update(values)
        async with self._session_factory() as session:
            return await ConversationRepository(session).create_message(Message(**defaults))


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)
