"""
FastAPI Application Entry Point

Builds the whole service in one synchronous pass so configuration errors
surface before a server is started:

    settings -> exporter binding -> logging sink + tracing/metrics providers
             -> FastAPI app + instrumentation -> heartbeat + shutdown coordinator

The heartbeat starts with the lifespan; the coordinator runs when uvicorn
begins its graceful shutdown.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from ..core.config import Settings
from ..core.config import settings as default_settings
from ..observability.exporters import ExporterBinding, create_exporter_binding
from ..observability.instrumentation import instrument
from ..observability.logging import get_logger, setup_logging
from ..observability.metrics import setup_metrics
from ..observability.tracing import create_resource, setup_tracing
from ..services.heartbeat import HeartbeatTask
from ..services.lifecycle import ShutdownCoordinator
from .routes import hello_router

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    binding: Optional[ExporterBinding] = None,
) -> FastAPI:
    """
    Wire telemetry, background work and routes into a FastAPI application.

    Args:
        settings: Application settings (module-level settings by default).
        binding: Exporter binding; built from ``settings`` when omitted.

    Raises:
        ExporterConfigurationError: If the collector endpoint or protocol is
            invalid. Nothing has been started at that point.
    """
    settings = settings or default_settings
    if binding is None:
        binding = create_exporter_binding(settings.otlp_endpoint, settings.otlp_protocol)

    resource = create_resource(settings)
    sink = setup_logging(settings, binding, resource)
    tracer_provider = setup_tracing(settings, binding, resource)
    meter_provider = setup_metrics(settings, binding, resource)

    heartbeat = HeartbeatTask(sink, settings.heartbeat_interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        # Startup
        heartbeat.start()
        logger.info(
            "application.started",
            service=settings.service_name,
            environment=settings.environment,
            **binding.describe(),
        )
        yield
        # Shutdown; flushing may wait on exporter retries, keep it off the loop
        await asyncio.to_thread(app.state.coordinator.shutdown)
        await heartbeat.join(timeout=settings.heartbeat_interval_seconds)

    app = FastAPI(
        title=settings.service_name,
        version=settings.service_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(hello_router)

    instrumentation = instrument(app, tracer_provider, meter_provider)

    app.state.settings = settings
    app.state.log_sink = sink
    app.state.heartbeat = heartbeat
    app.state.instrumentation = instrumentation
    app.state.coordinator = ShutdownCoordinator(heartbeat, sink, instrumentation)
    return app
