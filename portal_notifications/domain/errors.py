"""Exceptions raised by the notification core."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for every error raised by the notification core."""


class ChannelConfigurationError(NotificationError, RuntimeError):
    """Raised when a channel is used without a usable provider or content."""


class ChannelValidationError(NotificationError, ValueError):
    """Raised when a channel payload is rejected before reaching the provider."""


class ChannelDeliveryError(NotificationError):
    """Raised when a provider fails to accept a message."""

    def __init__(self, channel: str, detail: str, *, status_code: int | None = None) -> None:
        self.channel = channel
        self.detail = detail
        self.status_code = status_code
        prefix = f"HTTP {status_code}: " if status_code is not None else ""
        super().__init__(f"{channel} delivery failed: {prefix}{detail}")


class InvalidEventPayload(NotificationError, ValueError):
    """Raised by a handler when the event payload lacks required fields."""

    def __init__(self, event_name: str, missing: list[str] | tuple[str, ...]) -> None:
        self.event_name = event_name
        self.missing = tuple(missing)
        super().__init__(
            f"Event '{event_name}' is missing required fields: {', '.join(self.missing)}"
        )


class JobAlreadyRunning(NotificationError, RuntimeError):
    """Raised when a scheduled job is triggered manually while it is running."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job '{job_id}' is already running")


__all__ = [
    "ChannelConfigurationError",
    "ChannelDeliveryError",
    "ChannelValidationError",
    "InvalidEventPayload",
    "JobAlreadyRunning",
    "NotificationError",
]
