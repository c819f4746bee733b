"""Settle-all fan-out of channel sends and the per-handler delivery report."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

CHANNEL_NOTIFICATION = "notification"
CHANNEL_EMAIL = "email"
CHANNEL_SMS = "sms"


@dataclass
class ChannelResult:
    """Result of one channel attempt inside a handler."""

    channel: str
    requested: bool
    success: bool
    error: str | None = None
    target: str | None = None
    detail: Any = None

    @classmethod
    def skipped(cls, channel: str, reason: str | None = None) -> "ChannelResult":
        return cls(channel=channel, requested=False, success=True, error=None, detail=reason)


@dataclass
class HandlerReport:
    """Channel results produced by one handler for one event."""

    event_name: str
    channels: list[ChannelResult] = field(default_factory=list)
    skipped_reason: str | None = None

    def add(self, *results: ChannelResult) -> "HandlerReport":
        self.channels.extend(results)
        return self

    def sent(self, channel: str) -> int:
        return sum(
            1
            for result in self.channels
            if result.channel == channel and result.requested and result.success
        )

    def failed(self, channel: str | None = None) -> int:
        return sum(
            1
            for result in self.channels
            if result.requested
            and not result.success
            and (channel is None or result.channel == channel)
        )


async def settle_all(
    attempts: Mapping[str, Awaitable[Any] | None],
    *,
    context: str = "",
) -> list[ChannelResult]:
    """Run channel coroutines concurrently and wait for every one of them.

    Keys name the channel, optionally followed by ``:target`` when the same
    channel is used for several recipients. ``None`` entries mark a channel
    that was not requested. A failure in one channel is logged and reported;
    it never cancels or hides the others.
    """

    names = list(attempts)
    pending = [(name, attempts[name]) for name in names if attempts[name] is not None]
    outcomes = await asyncio.gather(
        *(awaitable for _, awaitable in pending), return_exceptions=True
    )
    by_name = {name: outcome for (name, _), outcome in zip(pending, outcomes)}

    results: list[ChannelResult] = []
    for name in names:
        channel, _, target = name.partition(":")
        if name not in by_name:
            results.append(ChannelResult.skipped(channel))
            continue
        outcome = by_name[name]
        if isinstance(outcome, BaseException):
            logger.error(
                "%s channel failed%s: %s",
                name,
                f" ({context})" if context else "",
                outcome,
                exc_info=outcome,
            )
            results.append(
                ChannelResult(
                    channel=channel,
                    requested=True,
                    success=False,
                    error=str(outcome),
                    target=target or None,
                )
            )
            continue
        if outcome is False or (channel == CHANNEL_NOTIFICATION and outcome is None):
            results.append(
                ChannelResult(
                    channel=channel,
                    requested=True,
                    success=False,
                    error=f"{channel} was not stored",
                    target=target or None,
                )
            )
            continue
        results.append(
            ChannelResult(
                channel=channel,
                requested=True,
                success=True,
                target=target or None,
                detail=outcome,
            )
        )
    return results


__all__ = [
    "CHANNEL_EMAIL",
    "CHANNEL_NOTIFICATION",
    "CHANNEL_SMS",
    "ChannelResult",
    "HandlerReport",
    "settle_all",
]
