"""Periodic notification jobs."""

from .base import ScheduledJob
from .profile_activation import ActivationResult, ProfileActivationJob
from .retention import NotificationRetentionJob
from .runner import (
    NOTIFICATION_RETENTION_JOB,
    PROFILE_ACTIVATION_JOB,
    UNREAD_MESSAGES_JOB,
    NotificationJobs,
    SchedulerRunner,
    build_notification_jobs,
    build_scheduler,
)
from .unread_messages import UNREAD_ALERT_TYPE, UnreadAlertResult, UnreadMessageAlertJob

__all__ = [
    "ActivationResult",
    "NOTIFICATION_RETENTION_JOB",
    "NotificationJobs",
    "NotificationRetentionJob",
    "PROFILE_ACTIVATION_JOB",
    "ProfileActivationJob",
    "ScheduledJob",
    "SchedulerRunner",
    "UNREAD_ALERT_TYPE",
    "UNREAD_MESSAGES_JOB",
    "UnreadAlertResult",
    "UnreadMessageAlertJob",
    "build_notification_jobs",
    "build_scheduler",
]
