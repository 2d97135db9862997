"""
Heartbeat Task - periodic background log line

Emits "Background log at {Time}" once per interval until cancelled.
The pause between two lines is a timed wait on a stop event rather than
a sleep, so cancelling wakes the loop at once and no further line is
written.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from ..observability.logging import DIAGNOSTICS_LOGGER, LogSink, get_logger

logger = get_logger(__name__)
_diagnostics = logging.getLogger(DIAGNOSTICS_LOGGER)

HEARTBEAT_TEMPLATE = "Background log at {Time}"


def _local_now() -> datetime:
    return datetime.now().astimezone()


class HeartbeatTask:
    """
    Cancellable background loop bound to one asyncio event loop.

    Args:
        sink: Where heartbeat events are emitted.
        interval_seconds: Pause between two emissions.
        clock: Source of the ``Time`` field (local, timezone-aware now).
    """

    def __init__(
        self,
        sink: LogSink,
        interval_seconds: float,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"heartbeat interval must be positive, got {interval_seconds!r}")
        self._sink = sink
        self._interval = float(interval_seconds)
        self._clock = clock or _local_now
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None
        self.emitted = 0

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._stop is not None and self._stop.is_set()

    def start(self) -> asyncio.Task:
        """Schedule the loop on the running event loop. No-op while running."""
        if self.running:
            return self._task

        self._loop = asyncio.get_running_loop()
        self._stop = asyncio.Event()
        self._task = self._loop.create_task(self._run(self._stop), name="heartbeat")
        return self._task

    def cancel(self) -> None:
        """Signal the loop to stop. Safe to call repeatedly and from any thread."""
        stop, loop = self._stop, self._loop
        if stop is None or loop is None:
            return

        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None

        if current is loop:
            stop.set()
        elif not loop.is_closed():
            loop.call_soon_threadsafe(stop.set)

    async def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the loop to finish after ``cancel``.

        Returns False when ``timeout`` expires first; the task is then
        cancelled outright.
        """
        if self._task is None or self._task.done():
            return True
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout)
        except asyncio.TimeoutError:
            self._task.cancel()
            return False
        return True

    async def _run(self, stop: asyncio.Event) -> None:
        logger.info("heartbeat.started", interval_seconds=self._interval)

        while not stop.is_set():
            try:
                if self._sink.info(HEARTBEAT_TEMPLATE, Time=self._clock()) is not None:
                    self.emitted += 1
            except Exception:
                _diagnostics.exception("heartbeat emission failed")

            try:
                await asyncio.wait_for(stop.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass

        logger.info("heartbeat.stopped", emitted=self.emitted)
