"""
OpenTelemetry Tracing - Distributed tracing setup

Inbound request spans and outbound httpx spans are produced by the
instrumentation sources; this module only owns the provider they write to.
"""

from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from ..core.config import Settings
from .exporters import ExporterBinding
from .logging import get_logger

logger = get_logger(__name__)


def create_resource(settings: Settings) -> Resource:
    """Service identity attached to every span, metric point and log record."""
    return Resource.create({
        "service.name": settings.service_name,
        "service.version": settings.service_version,
        "deployment.environment": settings.environment,
    })


def setup_tracing(
    settings: Settings,
    binding: ExporterBinding,
    resource: Optional[Resource] = None,
) -> TracerProvider:
    """
    Configure OpenTelemetry tracing.

    Spans are batched and shipped in the background by the SDK; a slow or
    missing collector never blocks a request.
    """
    provider = TracerProvider(resource=resource or create_resource(settings))
    provider.add_span_processor(BatchSpanProcessor(binding.span_exporter()))

    trace.set_tracer_provider(provider)
    logger.debug("tracing.configured", **binding.describe())
    return provider
