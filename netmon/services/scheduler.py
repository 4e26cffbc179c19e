from __future__ import annotations

import asyncio
import contextlib
import enum
import logging

from netmon.services.monitor import MonitorService, TickResult

logger = logging.getLogger(__name__)


class SchedulerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Scheduler:
    """Fixed-interval loop around ``MonitorService.tick``.

    After a tick completes (its submission included) the loop waits the full
    ``interval_seconds`` before starting the next one, so consecutive
    submissions are always at least one interval apart and two ticks never
    run at the same time.

    ``stop()`` ends the loop. An idle scheduler stops at once; a running tick
    gets ``shutdown_grace_seconds`` to finish before it is cancelled, in which
    case whatever it had collected is discarded.
    """

    def __init__(
        self,
        *,
        monitor: MonitorService,
        interval_seconds: float,
        shutdown_grace_seconds: float = 5.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._monitor = monitor
        self._interval = interval_seconds
        self._grace = max(shutdown_grace_seconds, 0.0)
        self._state = SchedulerState.IDLE
        self._stop_event: asyncio.Event | None = None
        self._stop_requested = False
        self._last_result: TickResult | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def last_result(self) -> TickResult | None:
        return self._last_result

    def stop(self) -> None:
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    async def run(self, *, max_ticks: int | None = None) -> int:
        """Run until stopped (or ``max_ticks`` ticks). Returns the number of completed ticks."""
        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()

        completed = 0
        iteration = 0
        try:
            while not self._stop_event.is_set():
                if max_ticks is not None and iteration >= max_ticks:
                    break
                iteration += 1
                self._state = SchedulerState.RUNNING
                logger.info("Starting measurement iteration %d", iteration)
                finished = await self._run_tick(iteration)
                self._state = SchedulerState.IDLE
                if not finished:
                    break
                completed += 1

                if max_ticks is not None and iteration >= max_ticks:
                    break
                logger.info(
                    "Completed measurement iteration %d. Sleeping for %g seconds...",
                    iteration,
                    self._interval,
                )
                await self._wait(self._interval)
        finally:
            self._state = SchedulerState.STOPPED
            logger.info("Scheduler stopped after %d iterations", completed)
        return completed

    async def _wait(self, delay: float) -> None:
        assert self._stop_event is not None
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)

    async def _run_tick(self, iteration: int) -> bool:
        assert self._stop_event is not None
        tick_task = asyncio.create_task(self._monitor.tick(iteration), name=f"tick-{iteration}")
        stop_task = asyncio.create_task(self._stop_event.wait(), name="stop-wait")
        try:
            await asyncio.wait({tick_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
            if not tick_task.done():
                logger.info(
                    "Shutdown requested during iteration %d; waiting up to %.1fs for it",
                    iteration,
                    self._grace,
                )
                await asyncio.wait({tick_task}, timeout=self._grace)
            if not tick_task.done():
                tick_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await tick_task
                logger.warning(
                    "Cancelled iteration %d after the grace period, nothing was submitted",
                    iteration,
                )
                return False
        finally:
            stop_task.cancel()
            if not tick_task.done():
                tick_task.cancel()

        try:
            self._last_result = tick_task.result()
        except Exception:  # noqa: BLE001
            logger.exception("Measurement iteration %d failed", iteration)
        return True
