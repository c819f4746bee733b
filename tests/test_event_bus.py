"""Tests for the in-process event bus."""

from __future__ import annotations

import asyncio

import pytest

from portal_notifications.application.events import EventBus

pytestmark = pytest.mark.anyio


async def test_handlers_run_in_subscription_order() -> None:
    bus = EventBus()
    calls: list[str] = []

    async def first(payload):
        await asyncio.sleep(0.01)
        calls.append(f"first:{payload['id']}")

    async def second(payload):
        calls.append(f"second:{payload['id']}")

    def third(payload):
        calls.append(f"third:{payload['id']}")

    bus.subscribe("thing.happened", first)
    bus.subscribe("thing.happened", second)
    bus.subscribe("thing.happened", third)

    result = await bus.publish("thing.happened", {"id": 7})

    assert calls == ["first:7", "second:7", "third:7"]
    assert result.handled == 3
    assert result.ok


async def test_publish_without_subscribers_is_a_no_op() -> None:
    result = await EventBus().publish("nobody.listens", {"id": 1})

    assert result.handled == 0
    assert result.ok


async def test_failing_handler_does_not_stop_the_others(caplog) -> None:
    bus = EventBus()
    calls: list[str] = []

    async def broken(payload):
        raise RuntimeError("boom")

    async def healthy(payload):
        calls.append("healthy")
        return "done"

    bus.subscribe("thing.happened", broken)
    bus.subscribe("thing.happened", healthy)

    with caplog.at_level("ERROR"):
        result = await bus.publish("thing.happened", {})

    assert calls == ["healthy"]
    assert result.failed == 1
    assert isinstance(result.outcomes[0].error, RuntimeError)
    assert result.outcomes[1].result == "done"
    assert "failed" in caplog.text


async def test_propagate_errors_reraises_to_the_publisher() -> None:
    bus = EventBus(propagate_errors=True)

    async def broken(payload):
        raise ValueError("bad payload")

    bus.subscribe("thing.happened", broken)

    with pytest.raises(ValueError, match="bad payload"):
        await bus.publish("thing.happened", {})


async def test_slow_handler_times_out_and_next_handler_still_runs() -> None:
    bus = EventBus(handler_timeout=0.05)
    calls: list[str] = []

    async def slow(payload):
        await asyncio.sleep(1)

    async def quick(payload):
        calls.append("quick")

    bus.subscribe("thing.happened", slow)
    bus.subscribe("thing.happened", quick)

    result = await bus.publish("thing.happened", {})

    assert result.outcomes[0].timed_out
    assert not result.outcomes[0].succeeded
    assert result.outcomes[1].succeeded
    assert calls == ["quick"]


def test_subscribe_rejects_non_callables() -> None:
    with pytest.raises(TypeError):
        EventBus().subscribe("thing.happened", "not callable")  # type: ignore[arg-type]
