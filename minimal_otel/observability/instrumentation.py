"""
OpenTelemetry Instrumentation Setup

Registers the instrumentation sources of the service, all pointed at the
providers built from the shared exporter binding:

- FastAPI: inbound HTTP request spans and duration metrics
- httpx: outbound HTTP client spans and duration metrics
- runtime: interpreter memory, cpu time, gc and thread metrics

Nothing else defines spans or metrics; they are collected implicitly as
requests and client calls run.

The httpx and runtime instrumentors patch the whole process. The first
application to register them owns them until its shutdown; a second
application in the same process only gets the FastAPI source.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.system_metrics import SystemMetricsInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace import TracerProvider

from .logging import get_logger
from .metrics import register_runtime_metrics

logger = get_logger(__name__)


@dataclass
class Instrumentation:
    """Handle on the registered sources and the providers behind them."""

    tracer_provider: TracerProvider
    meter_provider: MeterProvider
    httpx_instrumentor: Optional[HTTPXClientInstrumentor] = None
    runtime_instrumentor: Optional[SystemMetricsInstrumentor] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _shut_down: bool = field(default=False, repr=False)

    @property
    def shut_down(self) -> bool:
        return self._shut_down

    def shutdown(self) -> bool:
        """
        Release the process-wide sources this handle owns and flush pending
        spans and metrics.

        Idempotent; returns True only for the call that did the work.
        """
        with self._lock:
            if self._shut_down:
                return False
            self._shut_down = True

        if self.httpx_instrumentor is not None and self.httpx_instrumentor.is_instrumented_by_opentelemetry:
            self.httpx_instrumentor.uninstrument()
        if self.runtime_instrumentor is not None and self.runtime_instrumentor.is_instrumented_by_opentelemetry:
            self.runtime_instrumentor.uninstrument()
        self.tracer_provider.shutdown()
        self.meter_provider.shutdown()
        logger.debug("instrumentation.shutdown")
        return True


def instrument(
    app: FastAPI,
    tracer_provider: TracerProvider,
    meter_provider: MeterProvider,
) -> Instrumentation:
    """Attach every instrumentation source to ``app`` and the given providers."""
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
    )

    handle = Instrumentation(tracer_provider=tracer_provider, meter_provider=meter_provider)

    httpx_instrumentor = HTTPXClientInstrumentor()
    if httpx_instrumentor.is_instrumented_by_opentelemetry:
        logger.warning("instrumentation.httpx_already_instrumented")
    else:
        httpx_instrumentor.instrument(
            tracer_provider=tracer_provider,
            meter_provider=meter_provider,
        )
        handle.httpx_instrumentor = httpx_instrumentor

    handle.runtime_instrumentor = register_runtime_metrics(meter_provider)

    sources = ["fastapi"]
    if handle.httpx_instrumentor is not None:
        sources.append("httpx")
    if handle.runtime_instrumentor is not None:
        sources.append("runtime")
    logger.debug("instrumentation.registered", sources=",".join(sources))
    return handle
