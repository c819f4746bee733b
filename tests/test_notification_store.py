"""Tests for the notification store: dedup, read marking, suppression and retention."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from portal_notifications.domain.entities import Notification
from portal_notifications.infrastructure.repositories import NotificationRepository
from portal_notifications.utils import now_in_app_timezone

pytestmark = pytest.mark.anyio


async def _store_at(session_factory, notification: Notification) -> Notification:
    async with session_factory() as session:
        return await NotificationRepository(session).replace(notification)


async def test_identical_notifications_collapse_into_one(store) -> None:
    first = await store.insert("user-1", None, "Payment", "Paid $10.00", "payment", "receipt-1")
    second = await store.insert("user-1", None, "Payment", "Paid $10.00", "payment", "receipt-1")

    assert first is not None and second is not None
    assert first.id != second.id
    assert await store.count_identical(second) == 1

    listed = await store.list_for_user("user-1")
    assert [notification.id for notification in listed] == [second.id]


async def test_notifications_differing_in_any_field_are_kept(store) -> None:
    await store.insert("user-1", None, "Payment", "Paid $10.00", "payment", "receipt-1")
    await store.insert("user-1", None, "Payment", "Paid $10.00", "payment", "receipt-2")
    await store.insert("user-1", "admin-1", "Payment", "Paid $10.00", "payment", "receipt-1")
    await store.insert("user-1", None, "Payment", "Paid $10.00", "payment", None)
    await store.insert("user-1", None, "Payment", "Paid $10.00", "payment", None)

    listed = await store.list_for_user("user-1")
    assert len(listed) == 4


@pytest.mark.parametrize(
    "error",
    [
        OperationalError("INSERT", {}, Exception("database is locked")),
        OSError("connection reset by peer"),
    ],
    ids=["database", "driver"],
)
async def test_insert_failure_is_logged_and_returns_none(store, monkeypatch, caplog, error) -> None:
    async def broken_replace(self, notification):
        raise error

    monkeypatch.setattr(NotificationRepository, "replace", broken_replace)

    with caplog.at_level("ERROR"):
        result = await store.insert("user-1", None, "Title", "Body", "system")

    assert result is None
    assert "Failed to store system notification for recipient user-1" in caplog.text


async def test_mark_all_read_covers_user_and_every_role_profile(store, seed) -> None:
    user = await seed.user()
    athlete = await seed.athlete(user)
    team = await seed.team(user)
    stranger = await seed.user()

    await store.insert(user.id, None, "Account", "Welcome", "system")
    await store.insert(athlete.id, None, "Athlete", "Profile viewed", "profile_view")
    await store.insert(team.id, None, "Team", "New message", "message")
    await store.insert(stranger.id, None, "Other", "Untouched", "system")

    updated = await store.mark_all_read(user.id)

    assert updated == 3
    assert await store.list_for_user(user.id, unread_only=True) == []
    assert len(await store.list_for_user(stranger.id, unread_only=True)) == 1


async def test_mark_read_ignores_notifications_of_other_users(store, seed) -> None:
    owner = await seed.user()
    other = await seed.user()
    own = await store.insert(owner.id, None, "Mine", "Body", "system")
    foreign = await store.insert(other.id, None, "Theirs", "Body", "system")

    updated = await store.mark_read(owner.id, [own.id, foreign.id])

    assert updated == 1
    assert len(await store.list_for_user(other.id, unread_only=True)) == 1


async def test_was_alerted_within_respects_the_window(store, session_factory) -> None:
    now = now_in_app_timezone()
    await _store_at(
        session_factory,
        Notification(
            id=None,
            recipient_id="athlete-1",
            sender_id=None,
            title="Unread message",
            message="You have an unread message",
            notification_type="message.unread_alert",
            entity_id="message-1",
            created_at=now - timedelta(hours=3),
        ),
    )

    window = timedelta(hours=24)
    assert await store.was_alerted_within(
        "athlete-1", "message-1", "message.unread_alert", window, now=now
    )
    assert not await store.was_alerted_within(
        "athlete-1", "message-2", "message.unread_alert", window, now=now
    )
    assert not await store.was_alerted_within(
        "athlete-1", "message-1", "message.unread_alert", window, now=now + timedelta(hours=22)
    )


async def test_purge_expired_removes_only_old_notifications(store, session_factory) -> None:
    now = now_in_app_timezone()
    for entity_id, age in (("old", timedelta(days=61)), ("recent", timedelta(days=59))):
        await _store_at(
            session_factory,
            Notification(
                id=None,
                recipient_id="user-1",
                sender_id=None,
                title="Title",
                message="Body",
                notification_type="system",
                entity_id=entity_id,
                created_at=now - age,
            ),
        )

    removed = await store.purge_expired(now)

    assert removed == 1
    remaining = await store.list_for_user("user-1")
    assert [notification.entity_id for notification in remaining] == ["recent"]
