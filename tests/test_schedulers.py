"""Tests for the unread message alerts, profile activation and job wrapper."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from portal_notifications.application.schedulers import (
    PROFILE_ACTIVATION_JOB,
    UNREAD_ALERT_TYPE,
    UNREAD_MESSAGES_JOB,
    ProfileActivationJob,
    ScheduledJob,
    UnreadMessageAlertJob,
    build_notification_jobs,
    build_scheduler,
)
from portal_notifications.domain.errors import JobAlreadyRunning
from portal_notifications.infrastructure.repositories import (
    AthleteProfileRepository,
    ConversationRepository,
)
from portal_notifications.utils import now_in_app_timezone

pytestmark = pytest.mark.anyio


async def _athlete_conversation(seed, **user_values):
    athlete_user = await seed.user(**user_values)
    athlete = await seed.athlete(athlete_user)
    team = await seed.team(await seed.user())
    conversation = await seed.conversation(athlete, team)
    return athlete_user, athlete, conversation


async def test_unread_alert_sends_every_channel_once_per_window(context, seed, store, email_provider, sms_provider) -> None:
    athlete_user, athlete, conversation = await _athlete_conversation(
        seed, phone_number="+15551234567"
    )
    message = await seed.message_to_athlete(conversation, age=timedelta(hours=3))
    job = UnreadMessageAlertJob(context)

    first = await job.run()

    assert first.as_dict() == {
        "processed": 1,
        "notifications_created": 1,
        "emails_sent": 1,
        "sms_sent": 1,
        "errors": 0,
        "suppressed": 0,
    }
    assert await store.was_alerted_within(
        athlete.id, message.id, UNREAD_ALERT_TYPE, timedelta(hours=24)
    )

    second = await job.run()

    assert second.processed == 0
    assert second.emails_sent == 0
    assert len(email_provider.sent_messages) == 1
    assert len(sms_provider.sent_messages) == 1


async def test_alerted_messages_do_not_crowd_out_newer_ones(context, seed, email_provider) -> None:
    _, _, conversation = await _athlete_conversation(seed)
    await seed.message_to_athlete(conversation, age=timedelta(hours=6))
    await seed.message_to_athlete(conversation, age=timedelta(hours=5))
    job = UnreadMessageAlertJob(context, batch_size=2)

    first = await job.run()
    newer = await seed.message_to_athlete(
        conversation, age=timedelta(hours=3), content="Can you send your highlight reel?"
    )
    second = await job.run()

    assert first.emails_sent == 2
    assert second.as_dict() == {
        "processed": 1,
        "notifications_created": 1,
        "emails_sent": 1,
        "sms_sent": 0,
        "errors": 0,
        "suppressed": 0,
    }
    assert len(email_provider.sent_messages) == 3
    assert "highlight reel" in email_provider.sent_messages[-1].html


async def test_unread_alert_fires_again_after_the_window(context, seed, email_provider) -> None:
    _, _, conversation = await _athlete_conversation(seed)
    await seed.message_to_athlete(conversation, age=timedelta(hours=3))
    job = UnreadMessageAlertJob(context)

    await job.run()
    later = await job.run(now=now_in_app_timezone() + timedelta(hours=25))

    assert later.suppressed == 0
    assert later.emails_sent == 1
    assert len(email_provider.sent_messages) == 2


async def test_unread_alert_skips_recent_read_and_archived_messages(context, seed, session_factory) -> None:
    _, _, conversation = await _athlete_conversation(seed)
    await seed.message_to_athlete(conversation, age=timedelta(minutes=30))
    await seed.message_to_athlete(conversation, read=True)
    team_user = await seed.user()
    athlete = await seed.athlete(await seed.user())
    archived = await seed.conversation(athlete, await seed.team(team_user), status="archived")
    await seed.message_to_athlete(archived)

    result = await UnreadMessageAlertJob(context).run()

    assert result.processed == 0


async def test_process_message_ignores_suppression(context, seed, email_provider) -> None:
    _, _, conversation = await _athlete_conversation(seed)
    message = await seed.message_to_athlete(conversation, age=timedelta(minutes=5))
    job = UnreadMessageAlertJob(context)

    await job.process_message(message.id)
    result = await job.process_message(message.id)

    assert result.emails_sent == 1
    assert len(email_provider.sent_messages) == 2


async def test_process_message_rejects_unknown_ids(context) -> None:
    with pytest.raises(LookupError):
        await UnreadMessageAlertJob(context).process_message("missing")


async def test_empty_profile_is_deactivated_then_reactivated(seed, session_factory) -> None:
    user = await seed.user()
    athlete = await seed.athlete(user, created_at=now_in_app_timezone() - timedelta(days=2))
    fresh = await seed.athlete(user)
    worked = await seed.athlete(
        user,
        created_at=now_in_app_timezone() - timedelta(days=2),
        profile_image_url="https://cdn.test/p.png",
    )
    job = ProfileActivationJob(session_factory)

    deactivation = await job.deactivate()

    assert deactivation.as_dict() == {"success_count": 1, "error_count": 0, "total_processed": 1}
    async with session_factory() as session:
        repository = AthleteProfileRepository(session)
        stored = await repository.get(athlete.id)
        assert stored.is_active is False
        assert stored.deactivation_reason == "Zero work completed after 24 hours"
        assert (await repository.get(fresh.id)).is_active is True
        assert (await repository.get(worked.id)).is_active is True

    assert (await job.reactivate()).success_count == 0

    async with session_factory() as session:
        model = await session.get(
            AthleteProfileRepository.model, athlete.id
        )
        model.measurements = {"height_cm": 183}
        await session.commit()

    reactivation = await job.reactivate()

    assert reactivation.as_dict() == {"success_count": 1, "error_count": 0, "total_processed": 1}
    async with session_factory() as session:
        stored = await AthleteProfileRepository(session).get(athlete.id)
        assert stored.is_active is True
        assert stored.deactivated_at is None
        assert stored.reactivated_at is not None


async def test_manage_runs_both_phases(session_factory) -> None:
    summary = await ProfileActivationJob(session_factory).manage()

    assert summary == {
        "deactivation": {"success_count": 0, "error_count": 0, "total_processed": 0},
        "reactivation": {"success_count": 0, "error_count": 0, "total_processed": 0},
    }


async def test_scheduled_job_skips_or_rejects_overlapping_runs() -> None:
    release = asyncio.Event()
    started = asyncio.Event()
    runs: list[str] = []

    async def slow_run():
        runs.append("run")
        started.set()
        await release.wait()
        return {"done": True}

    job = ScheduledJob(
        "slow", "Slow job", slow_run, trigger=IntervalTrigger(minutes=5), schedule="Every 5 minutes"
    )

    first = asyncio.ensure_future(job.run_scheduled())
    await started.wait()

    assert job.status()["running"] is True
    assert await job.run_scheduled() is None
    with pytest.raises(JobAlreadyRunning):
        await job.trigger()

    release.set()
    assert await first == {"done": True}
    assert runs == ["run"]
    assert job.status() == {"running": False, "schedule": "Every 5 minutes", "next_run": None}


async def test_scheduled_run_swallows_failures(caplog) -> None:
    async def broken():
        raise RuntimeError("database unavailable")

    job = ScheduledJob(
        "broken", "Broken job", broken, trigger=IntervalTrigger(minutes=5), schedule="Every 5 minutes"
    )

    with caplog.at_level("ERROR"):
        assert await job.run_scheduled() is None

    assert job.running is False
    assert "scheduled run failed" in caplog.text
    with pytest.raises(RuntimeError):
        await job.trigger()


async def test_scheduler_runner_reports_next_runs(context) -> None:
    runner = build_scheduler(build_notification_jobs(context), timezone="America/Los_Angeles")

    assert set(runner.status()) == {UNREAD_MESSAGES_JOB, PROFILE_ACTIVATION_JOB, "notification-retention"}
    assert runner.status()[UNREAD_MESSAGES_JOB]["schedule"] == "Every 30 minutes"

    runner.start()
    try:
        assert runner.running
        assert runner.status()[PROFILE_ACTIVATION_JOB]["next_run"] is not None
    finally:
        runner.shutdown()
    with pytest.raises(KeyError):
        runner.get("unknown")


async def test_unread_messages_are_listed_oldest_first(seed, session_factory) -> None:
    _, _, conversation = await _athlete_conversation(seed)
    older = await seed.message_to_athlete(conversation, age=timedelta(hours=5))
    newer = await seed.message_to_athlete(conversation, age=timedelta(hours=3))

    async with session_factory() as session:
        messages = await ConversationRepository(session).list_unread_for_role(
            receiver_role="athlete", created_before=now_in_app_timezone() - timedelta(hours=2)
        )

    assert [message.id for message in messages] == [older.id, newer.id]
