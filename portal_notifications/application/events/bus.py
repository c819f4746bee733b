"""In-process publish/subscribe bus for domain events.

Handlers subscribed to an event name run one after the other, in the order
they were subscribed, and each is awaited before the next one starts. A
handler failure is logged and recorded on the :class:`PublishResult`; it never
stops the remaining handlers nor reaches the publisher unless the bus was
built with ``propagate_errors=True``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

logger = logging.getLogger(__name__)

EventPayload = Mapping[str, Any]
EventHandler = Callable[[EventPayload], Union[Awaitable[Any], Any]]


def handler_name(handler: EventHandler) -> str:
    """Return a readable name for ``handler`` used in logs and results."""

    name = getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None)
    return name or handler.__class__.__name__


@dataclass
class HandlerOutcome:
    """What happened when one handler processed one event."""

    handler: str
    succeeded: bool
    result: Any = None
    error: BaseException | None = None
    timed_out: bool = False
    duration: float = 0.0


@dataclass
class PublishResult:
    """Outcomes of every handler invoked for a published event."""

    event_name: str
    outcomes: list[HandlerOutcome] = field(default_factory=list)

    @property
    def handled(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return self.handled - self.succeeded

    @property
    def ok(self) -> bool:
        return self.failed == 0


class EventBus:
    """Explicit event bus instance created once at startup and injected where needed."""

    def __init__(
        self,
        *,
        handler_timeout: float | None = None,
        propagate_errors: bool = False,
    ) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self.handler_timeout = handler_timeout or None
        self.propagate_errors = propagate_errors

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Append ``handler`` to the subscribers of ``event_name``."""

        if not callable(handler):
            raise TypeError(f"Handler for '{event_name}' must be callable")
        self._handlers.setdefault(event_name, []).append(handler)
        logger.debug("Subscribed %s to %s", handler_name(handler), event_name)

    def handlers_for(self, event_name: str) -> list[EventHandler]:
        return list(self._handlers.get(event_name, ()))

    def event_names(self) -> list[str]:
        return sorted(self._handlers)

    async def publish(self, event_name: str, payload: EventPayload | None = None) -> PublishResult:
        """Run every handler subscribed to ``event_name`` with ``payload``."""

        result = PublishResult(event_name=event_name)
        handlers = self.handlers_for(event_name)
        if not handlers:
            return result

        data: EventPayload = payload if payload is not None else {}
        for handler in handlers:
            outcome = await self._invoke(event_name, handler, data)
            result.outcomes.append(outcome)

        if result.failed:
            logger.warning(
                "Event %s: %s of %s handlers failed",
                event_name,
                result.failed,
                result.handled,
            )
        return result

    async def _invoke(
        self, event_name: str, handler: EventHandler, payload: EventPayload
    ) -> HandlerOutcome:
        name = handler_name(handler)
        started = time.perf_counter()
        try:
            value = await self._call(handler, payload)
        except asyncio.TimeoutError as exc:
            duration = time.perf_counter() - started
            logger.error(
                "Handler %s for %s timed out after %.2fs", name, event_name, duration
            )
            if self.propagate_errors:
                raise
            return HandlerOutcome(
                handler=name,
                succeeded=False,
                error=exc,
                timed_out=True,
                duration=duration,
            )
        except Exception as exc:
            duration = time.perf_counter() - started
            logger.exception("Handler %s for %s failed", name, event_name)
            if self.propagate_errors:
                raise
            return HandlerOutcome(handler=name, succeeded=False, error=exc, duration=duration)

        return HandlerOutcome(
            handler=name,
            succeeded=True,
            result=value,
            duration=time.perf_counter() - started,
        )

    async def _call(self, handler: EventHandler, payload: EventPayload) -> Any:
        value = handler(payload)
        if not inspect.isawaitable(value):
            return value
        if self.handler_timeout is None:
            return await value
        return await asyncio.wait_for(value, timeout=self.handler_timeout)


__all__ = [
    "EventBus",
    "EventHandler",
    "EventPayload",
    "HandlerOutcome",
    "PublishResult",
    "handler_name",
]
