"""Periodic purge of expired violation records and tracked events.

Runs as a background asyncio task on a fixed interval. Each purge only
removes records strictly older than its cutoff, so counts over any window
that lies entirely after the cutoff are unchanged by a sweep.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable

from automod.configuration.app_configuration import AutomodConfig
from automod.database.store import AutomodStore
from automod.util.logger import get_logger

logger = get_logger("expiry_sweeper")


@dataclass(slots=True)
class SweepResult:
    violations_purged: int = 0
    events_purged: int = 0


class ExpirySweeper:
    """
    Background task deleting expired automod tracking data.

    Args:
        store: Store to purge.
        config: Supplies the sweep interval and both retention windows.
        clock: Source of the current unix time.
    """

    def __init__(
        self,
        store: AutomodStore,
        config: AutomodConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._config = config or AutomodConfig()
        self._clock = clock
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> SweepResult:
        """Purge old violations and events once. Failures are logged, never raised."""
        now = self._clock()
        result = SweepResult()

        try:
            result.violations_purged = await self._store.purge_violations_before(
                now - self._config.violation_window_seconds
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("[SWEEPER] Failed to purge violations: %s", exc)

        try:
            result.events_purged = await self._store.purge_events_before(
                now - self._config.tracking_retention_seconds
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("[SWEEPER] Failed to purge tracked events: %s", exc)

        if result.violations_purged or result.events_purged:
            logger.debug(
                "[SWEEPER] Purged %d violation(s) and %d event(s)",
                result.violations_purged, result.events_purged,
            )
        return result

    async def _run_loop(self, interval: float) -> None:
        logger.info("[SWEEPER] Starting expiry sweep (interval=%.1fs)", interval)
        try:
            while True:
                await asyncio.sleep(interval)
                await self.sweep_once()
        except asyncio.CancelledError:
            logger.info("[SWEEPER] Expiry sweep cancelled")
            raise

    def start(self) -> None:
        """Start the background sweep task if not already running."""
        if self.running:
            logger.warning("[SWEEPER] Sweep task already running")
            return
        self._task = asyncio.create_task(self._run_loop(self._config.sweep_interval_seconds))

    async def shutdown(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("[SWEEPER] Sweeper shutdown complete")
