"""Background loops run inside the API process (report emails)."""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Awaitable, Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from depwatch.engines.notification.runner import NotificationRunner

logger = structlog.get_logger(__name__)


class EngineLoop:
    """Calls ``run_fn`` every ``interval`` seconds, or sooner after :meth:`wake`.

    ``run_fn`` returns how many items it processed. Its exceptions are
    logged and never end the loop.
    """

    def __init__(
        self,
        name: str,
        run_fn: Callable[[], Awaitable[int]],
        interval: float,
    ) -> None:
        self.name = name
        self.run_fn = run_fn
        self.interval = interval
        self.trigger = asyncio.Event()

    def wake(self) -> None:
        self.trigger.set()

    async def run_once(self) -> int | None:
        """One cycle. Returns the processed count, or None if ``run_fn`` raised."""
        started = time.monotonic()
        try:
            processed = await self.run_fn()
        except Exception:
            logger.exception("engine.error", engine=self.name)
            return None
        logger.info(
            "engine.cycle",
            engine=self.name,
            processed=processed,
            duration_s=round(time.monotonic() - started, 2),
        )
        return processed

    async def loop(self) -> None:
        while True:
            try:
                await asyncio.wait_for(self.trigger.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
            self.trigger.clear()
            await self.run_once()


class Scheduler:
    """Owns one task per :class:`EngineLoop`."""

    def __init__(self, loops: list[EngineLoop]) -> None:
        self._loops = loops
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def start(self) -> None:
        """Spawn the loops and wake each so the first cycle runs immediately."""
        for loop in self._loops:
            self._tasks.append(asyncio.create_task(loop.loop(), name=f"engine-{loop.name}"))
            loop.wake()
        logger.info("scheduler.started", engines=[loop.name for loop in self._loops])

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("scheduler.stopped")


def create_scheduler(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    notification_runner: NotificationRunner,
) -> Scheduler:
    """Scheduler with the notification loop.

    The loop polls every ``DEPWATCH_NOTIFY_POLL_INTERVAL`` seconds (default
    300). Which subscriptions are due is decided by ``DEPWATCH_NOTIFY_INTERVAL``
    in the DAO.
    """
    poll_interval = float(os.environ.get("DEPWATCH_NOTIFY_POLL_INTERVAL", "300"))

    async def _notify() -> int:
        return await notification_runner.run_batch(session_factory)

    return Scheduler([EngineLoop("notification", _notify, poll_interval)])
