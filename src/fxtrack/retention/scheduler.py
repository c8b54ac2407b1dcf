"""Daily background task that runs the system-wide retention sweep.

Sleeps until the next configured UTC time of day, sweeps, and repeats.
A failed sweep is logged and retried at the next scheduled time; the sweep
is idempotent so a missed day only delays cleanup.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from fxtrack.config import RetentionSettings
from fxtrack.logging import get_logger
from fxtrack.retention.pruner import RetentionPruner

logger = get_logger(__name__)


def seconds_until_next_run(now: datetime, hour: int, minute: int) -> float:
    """Seconds from ``now`` (aware, UTC) to the next hour:minute UTC, always > 0."""
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class RetentionScheduler:
    """Runs RetentionPruner.sweep() once a day at a fixed UTC time."""

    def __init__(self, pruner: RetentionPruner, settings: RetentionSettings) -> None:
        self._pruner = pruner
        self._settings = settings
        self._running = False
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            logger.warning("retention_scheduler_already_running")
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "retention_scheduler_started",
            at=f"{self._settings.sweep_hour_utc:02d}:{self._settings.sweep_minute_utc:02d} UTC",
        )

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("retention_scheduler_stopped")

    async def _loop(self) -> None:
        try:
            while self._running:
                delay = seconds_until_next_run(
                    datetime.now(timezone.utc),
                    self._settings.sweep_hour_utc,
                    self._settings.sweep_minute_utc,
                )
                logger.debug("retention_sweep_scheduled", in_seconds=round(delay))
                await asyncio.sleep(delay)
                await self.run_once()
        except asyncio.CancelledError:
            raise
        except Exception:
            self._running = False
            logger.error("retention_scheduler_crashed", exc_info=True)

    async def run_once(self) -> None:
        """Run one sweep, logging instead of raising so the loop survives."""
        try:
            await self._pruner.sweep()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.error("retention_sweep_failed", exc_info=True)
