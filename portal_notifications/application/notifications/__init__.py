"""Notification persistence and channel fan-out helpers."""

from .dispatch import (
    CHANNEL_EMAIL,
    CHANNEL_NOTIFICATION,
    CHANNEL_SMS,
    ChannelResult,
    HandlerReport,
    settle_all,
)
from .store import DEFAULT_RETENTION, NotificationStore

__all__ = [
    "CHANNEL_EMAIL",
    "CHANNEL_NOTIFICATION",
    "CHANNEL_SMS",
    "ChannelResult",
    "DEFAULT_RETENTION",
    "HandlerReport",
    "NotificationStore",
    "settle_all",
]
