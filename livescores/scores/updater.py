from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable

from livescores.scores.service import ScoreService

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_INTERVAL_SECONDS = 60
DEFAULT_CLEANUP_INTERVAL_SECONDS = 24 * 60 * 60
DEFAULT_RETENTION_DAYS = 7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScoreUpdater:
    """Refreshes every tracked sport on a fixed interval and prunes old games daily.

    Both loops run immediately on start and then wait on a shared stop event,
    so stop() wakes them at once and awaits their exit.
    """

    def __init__(
        self,
        service: ScoreService,
        *,
        interval_seconds: float = DEFAULT_UPDATE_INTERVAL_SECONDS,
        cleanup_interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        self.service = service
        self.interval_seconds = interval_seconds
        self.cleanup_interval_seconds = cleanup_interval_seconds
        self.retention_days = retention_days
        self.last_update: datetime | None = None
        self.update_count = 0
        self._stop_event: asyncio.Event | None = None
        self._tasks: list[asyncio.Task] = []

    @property
    def is_running(self) -> bool:
        return self._stop_event is not None

    def start(self) -> None:
        """Start both loops on the running event loop. Starting twice is a no-op."""
        if self.is_running:
            logger.warning("Score updater is already running")
            return

        logger.info(
            "Starting score updater: interval=%ss cleanup_interval=%ss retention_days=%s",
            self.interval_seconds,
            self.cleanup_interval_seconds,
            self.retention_days,
        )
        self._stop_event = asyncio.Event()
        self._tasks = [
            asyncio.create_task(
                self._run_every(self.interval_seconds, self.update_scores, self._stop_event),
                name="score-updater",
            ),
            asyncio.create_task(
                self._run_every(self.cleanup_interval_seconds, self.cleanup, self._stop_event),
                name="score-cleanup",
            ),
        ]

    async def stop(self) -> None:
        if not self.is_running:
            return
        logger.info("Stopping score updater")
        self._stop_event.set()
        tasks, self._tasks = self._tasks, []
        await asyncio.gather(*tasks, return_exceptions=True)
        self._stop_event = None
        logger.info("Score updater stopped.")

    async def _run_every(
        self,
        interval_seconds: float,
        job: Callable[[], Awaitable[None]],
        stop_event: asyncio.Event,
    ) -> None:
        while not stop_event.is_set():
            await job()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
            except asyncio.TimeoutError:
                continue

    async def update_scores(self) -> None:
        started = time.perf_counter()
        try:
            results = await self.service.refresh_all_scores()
        except Exception:
            logger.exception("Score update failed.")
            return

        self.last_update = _utcnow()
        self.update_count += 1
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Score update done: updated=%s duration_ms=%.0f results=%s",
            sum(results.values()),
            duration_ms,
            results,
        )

    async def cleanup(self) -> None:
        try:
            deleted = await self.service.cleanup_old_scores(self.retention_days)
        except Exception:
            logger.exception("Score cleanup failed.")
            return
        logger.info("Score cleanup done: deleted=%s", deleted)

    async def force_update(self) -> None:
        logger.info("Forcing immediate score update")
        await self.update_scores()

    def get_status(self) -> dict:
        return {
            "is_running": self.is_running,
            "last_update": self.last_update,
            "update_count": self.update_count,
            "interval_ms": int(self.interval_seconds * 1000),
        }
