"""Running-flag wrapper shared by the periodic jobs."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from apscheduler.triggers.base import BaseTrigger

from portal_notifications.domain.errors import JobAlreadyRunning

logger = logging.getLogger(__name__)

JobRun = Callable[..., Awaitable[Any]]


class ScheduledJob:
    """A periodic job with a single in-flight run at a time.

    Scheduled runs that find the job busy are skipped; manual runs raise
    :class:`JobAlreadyRunning` instead.
    """

    def __init__(
        self,
        job_id: str,
        name: str,
        run: JobRun,
        *,
        trigger: BaseTrigger,
        schedule: str,
    ) -> None:
        self.job_id = job_id
        self.name = name
        self.schedule_trigger = trigger
        self.schedule = schedule
        self._run = run
        self.running = False

    async def run_scheduled(self) -> Any:
        """Entry point used by the scheduler; never raises."""

        if self.running:
            logger.info("%s: previous run still in progress, skipping", self.name)
            return None
        try:
            return await self._execute(self._run)
        except Exception:
            logger.exception("%s: scheduled run failed", self.name)
            return None

    async def trigger(self, run: JobRun | None = None, *args: Any, **kwargs: Any) -> Any:
        """Run the job now, or ``run`` under the job's running flag."""

        if self.running:
            raise JobAlreadyRunning(self.job_id)
        logger.info("%s: manual run triggered", self.name)
        return await self._execute(run or self._run, *args, **kwargs)

    async def _execute(self, run: JobRun, *args: Any, **kwargs: Any) -> Any:
        self.running = True
        try:
            result = await run(*args, **kwargs)
        finally:
            self.running = False
        logger.info("%s: run completed: %s", self.name, result)
        return result

    def status(self, next_run: datetime | None = None) -> dict[str, Any]:
        return {
            "running": self.running,
            "schedule": self.schedule,
            "next_run": next_run,
        }


__all__ = ["JobRun", "ScheduledJob"]
