"""
Lifecycle Coordinator - ordered shutdown of the background work and telemetry

Called once from the application lifespan after the server has stopped
accepting requests:

    1. cancel the heartbeat
    2. log "Application stopping"
    3. flush and close the logging sink
    4. shut down the tracing and metrics providers

The heartbeat is only signalled, not awaited, before the sink is flushed;
a heartbeat line racing the flush may reach the console only.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from ..observability.instrumentation import Instrumentation
from ..observability.logging import DIAGNOSTICS_LOGGER, LogSink, get_logger
from .heartbeat import HeartbeatTask

logger = get_logger(__name__)
_diagnostics = logging.getLogger(DIAGNOSTICS_LOGGER)

STOPPING_MESSAGE = "Application stopping"


class ShutdownCoordinator:
    """Runs the shutdown sequence at most once, whoever triggers it."""

    def __init__(
        self,
        heartbeat: HeartbeatTask,
        sink: LogSink,
        instrumentation: Optional[Instrumentation] = None,
    ) -> None:
        self._heartbeat = heartbeat
        self._sink = sink
        self._instrumentation = instrumentation
        self._lock = threading.Lock()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def shutdown(self) -> bool:
        """Returns True for the call that performed the shutdown."""
        with self._lock:
            if self._done:
                return False
            self._done = True

            self._heartbeat.cancel()
            self._sink.info(STOPPING_MESSAGE)

            try:
                self._sink.flush_and_close()
            except Exception:
                _diagnostics.exception("log sink flush failed")

            if self._instrumentation is not None:
                try:
                    self._instrumentation.shutdown()
                except Exception:
                    _diagnostics.exception("telemetry provider shutdown failed")

        logger.info("lifecycle.shutdown_complete")
        return True
