"""
Shared fixtures - in-memory stand-ins for the OTLP collector

The bindings below mimic ExporterBinding but keep everything in process,
so tests can inspect exported spans, log records and metrics without a
collector.
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

import pytest
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.system_metrics import SystemMetricsInstrumentor
from opentelemetry.sdk._logs.export import InMemoryLogRecordExporter, LogRecordExporter
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export import SpanExporter
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from minimal_otel.core.config import Settings


@dataclass
class InMemoryBinding:
    """Exporter binding whose exporters keep telemetry in memory."""

    endpoint: str = "http://collector.test:4317"
    spans: SpanExporter = field(default_factory=InMemorySpanExporter)
    logs: LogRecordExporter = field(default_factory=InMemoryLogRecordExporter)
    reader: InMemoryMetricReader = field(default_factory=InMemoryMetricReader)

    def span_exporter(self) -> SpanExporter:
        return self.spans

    def log_exporter(self) -> LogRecordExporter:
        return self.logs

    def metric_reader(self, export_interval_millis: float = 60_000) -> InMemoryMetricReader:
        return self.reader

    def describe(self) -> dict:
        return {"endpoint": self.endpoint, "protocol": "grpc", "insecure": True}

    def log_bodies(self) -> list:
        return [r.log_record.body for r in self.logs.get_finished_logs()]


class UnreachableSpanExporter(SpanExporter):
    """Behaves like an exporter whose collector refuses every connection."""

    def __init__(self) -> None:
        self.attempts = 0

    def export(self, spans: Sequence):
        self.attempts += 1
        raise ConnectionRefusedError("collector.test:4317 unreachable")

    def shutdown(self) -> None:
        pass


class UnreachableLogExporter(LogRecordExporter):
    def __init__(self) -> None:
        self.attempts = 0

    def export(self, batch: Sequence):
        self.attempts += 1
        raise ConnectionRefusedError("collector.test:4317 unreachable")

    def shutdown(self) -> None:
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        service_name="minimal-otel-test",
        environment="test",
        heartbeat_interval_seconds=0.05,
        otlp_endpoint="http://collector.test:4317",
    )


@pytest.fixture
def binding() -> InMemoryBinding:
    return InMemoryBinding()


@pytest.fixture
def other_binding() -> InMemoryBinding:
    return InMemoryBinding(endpoint="http://other-collector.test:4317")


@pytest.fixture
def failing_binding() -> InMemoryBinding:
    return InMemoryBinding(spans=UnreachableSpanExporter(), logs=UnreachableLogExporter())


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging installs root handlers; put the root logger back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _release_process_instrumentors():
    """httpx and runtime instrumentors are process-wide; never leak one into the next test."""
    yield
    for instrumentor in (HTTPXClientInstrumentor(), SystemMetricsInstrumentor()):
        if instrumentor.is_instrumented_by_opentelemetry:
            instrumentor.uninstrument()
