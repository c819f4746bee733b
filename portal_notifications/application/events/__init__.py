"""Domain event dispatch."""

from .bus import (
    EventBus,
    EventHandler,
    EventPayload,
    HandlerOutcome,
    PublishResult,
    handler_name,
)

__all__ = [
    "EventBus",
    "EventHandler",
    "EventPayload",
    "HandlerOutcome",
    "PublishResult",
    "handler_name",
]
