"""APScheduler wiring for the periodic notification jobs."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from portal_notifications.application.handlers.base import HandlerContext

from .base import ScheduledJob
from .profile_activation import ProfileActivationJob
from .retention import NotificationRetentionJob
from .unread_messages import UnreadMessageAlertJob

logger = logging.getLogger(__name__)

UNREAD_MESSAGES_JOB = "unread-messages"
PROFILE_ACTIVATION_JOB = "profile-activation"
NOTIFICATION_RETENTION_JOB = "notification-retention"


@dataclass
class NotificationJobs:
    """The job implementations behind the scheduled entries."""

    unread_messages: UnreadMessageAlertJob
    profile_activation: ProfileActivationJob
    retention: NotificationRetentionJob


def build_notification_jobs(context: HandlerContext) -> NotificationJobs:
    return NotificationJobs(
        unread_messages=UnreadMessageAlertJob(context),
        profile_activation=ProfileActivationJob(context.session_factory),
        retention=NotificationRetentionJob(context.store),
    )


class SchedulerRunner:
    """Own the :class:`AsyncIOScheduler` and the :class:`ScheduledJob` entries it fires."""

    def __init__(self, jobs: Iterable[ScheduledJob], *, timezone: str = "UTC") -> None:
        self.timezone = timezone
        self.scheduler = AsyncIOScheduler(timezone=timezone)
        self.jobs: dict[str, ScheduledJob] = {job.job_id: job for job in jobs}

    @property
    def running(self) -> bool:
        return bool(self.scheduler.running)

    def start(self) -> None:
        if self.scheduler.running:
            logger.warning("Scheduler already started, skipping duplicate initialization")
            return
        for job in self.jobs.values():
            self.scheduler.add_job(
                job.run_scheduled,
                trigger=job.schedule_trigger,
                id=job.job_id,
                name=job.name,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
        self.scheduler.start()
        for job_id in self.jobs:
            logger.info("Scheduled %s, next run at %s", job_id, self.next_run(job_id))

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    def get(self, job_id: str) -> ScheduledJob:
        """Return the job registered as ``job_id``; raises :class:`KeyError` otherwise."""

        return self.jobs[job_id]

    def next_run(self, job_id: str) -> datetime | None:
        if not self.scheduler.running:
            return None
        scheduled = self.scheduler.get_job(job_id)
        return scheduled.next_run_time if scheduled else None

    def status(self) -> dict[str, dict[str, Any]]:
        return {job_id: job.status(self.next_run(job_id)) for job_id, job in self.jobs.items()}


def build_scheduler(
    jobs: NotificationJobs,
    *,
    timezone: str = "America/Los_Angeles",
    unread_interval: timedelta = timedelta(minutes=30),
) -> SchedulerRunner:
    """Unread alerts every 30 minutes, activation at 02:00 and the retention sweep at 03:00."""

    interval_minutes = int(unread_interval.total_seconds() // 60)
    return SchedulerRunner(
        [
            ScheduledJob(
                UNREAD_MESSAGES_JOB,
                "Unread message alerts",
                jobs.unread_messages.run,
                trigger=IntervalTrigger(minutes=interval_minutes, timezone=timezone),
                schedule=f"Every {interval_minutes} minutes",
            ),
            ScheduledJob(
                PROFILE_ACTIVATION_JOB,
                "Athlete profile activation management",
                jobs.profile_activation.manage,
                trigger=CronTrigger(hour=2, minute=0, timezone=timezone),
                schedule=f"Daily at 02:00 ({timezone})",
            ),
            ScheduledJob(
                NOTIFICATION_RETENTION_JOB,
                "Notification retention sweep",
                jobs.retention.run,
                trigger=CronTrigger(hour=3, minute=0, timezone=timezone),
                schedule=f"Daily at 03:00 ({timezone})",
            ),
        ],
        timezone=timezone,
    )


__all__ = [
    "NOTIFICATION_RETENTION_JOB",
    "NotificationJobs",
    "PROFILE_ACTIVATION_JOB",
    "SchedulerRunner",
    "UNREAD_MESSAGES_JOB",
    "build_notification_jobs",
    "build_scheduler",
]
