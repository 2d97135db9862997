"""
OpenTelemetry Metrics - Meter provider and process runtime instrumentation

The meter provider pushes on a fixed interval through the exporter binding.
Runtime metrics come from the system-metrics instrumentation, limited to the
interpreter-level ``process.runtime.*`` set; host-wide ``system.*`` metrics
are left to the collector.
"""

from typing import Dict, List, Optional

from opentelemetry import metrics
from opentelemetry.instrumentation.system_metrics import SystemMetricsInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource

from ..core.config import Settings
from .exporters import ExporterBinding
from .logging import get_logger
from .tracing import create_resource

logger = get_logger(__name__)

RUNTIME_METRICS_CONFIG: Dict[str, Optional[List[str]]] = {
    "process.runtime.memory": ["rss", "vms"],
    "process.runtime.cpu.time": ["user", "system"],
    "process.runtime.gc_count": None,
    "process.runtime.thread_count": None,
    "process.runtime.cpu.utilization": None,
    "process.runtime.context_switches": ["involuntary", "voluntary"],
}


def setup_metrics(
    settings: Settings,
    binding: ExporterBinding,
    resource: Optional[Resource] = None,
) -> MeterProvider:
    """Configure the meter provider used by every instrumentation source."""
    provider = MeterProvider(
        resource=resource or create_resource(settings),
        metric_readers=[binding.metric_reader(settings.metric_export_interval_ms)],
    )
    metrics.set_meter_provider(provider)
    logger.debug("metrics.configured", interval_ms=settings.metric_export_interval_ms)
    return provider


def register_runtime_metrics(meter_provider: MeterProvider) -> Optional[SystemMetricsInstrumentor]:
    """
    Report interpreter memory, cpu time, gc and thread metrics on ``meter_provider``.

    The instrumentor is process-wide. If another provider already holds it,
    nothing is registered and None is returned.
    """
    instrumentor = SystemMetricsInstrumentor(config=RUNTIME_METRICS_CONFIG)
    if instrumentor.is_instrumented_by_opentelemetry:
        logger.warning("runtime_metrics.already_registered")
        return None

    instrumentor.instrument(meter_provider=meter_provider)
    return instrumentor
