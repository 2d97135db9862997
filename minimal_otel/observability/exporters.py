"""
Telemetry Exporter Binding - One OTLP destination for logs, metrics and traces

Holds the collector endpoint and wire protocol, and hands out exporter
instances to the logging sink and the tracing/metrics providers.

Building a binding validates the endpoint but never opens a connection:
an unreachable collector only shows up later, at export time, on the
``opentelemetry`` diagnostic logger.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union
from urllib.parse import urlsplit

from opentelemetry.sdk._logs.export import LogRecordExporter
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.trace.export import SpanExporter


class ExporterConfigurationError(ValueError):
    """The collector endpoint or protocol cannot be used. Fatal at startup."""


class OtlpProtocol(str, Enum):
    GRPC = "grpc"
    HTTP_PROTOBUF = "http/protobuf"


# Per-signal paths of the OTLP/HTTP specification
_HTTP_PATHS = {
    "traces": "/v1/traces",
    "metrics": "/v1/metrics",
    "logs": "/v1/logs",
}


@dataclass(frozen=True)
class ExporterBinding:
    """
    Reusable export configuration shared by every telemetry pipeline.

    Attributes:
        endpoint: Collector base URI, e.g. ``http://collector:4317``.
        protocol: OTLP transport.
        insecure: Plaintext channel (derived from an ``http`` scheme).
    """

    endpoint: str
    protocol: OtlpProtocol = OtlpProtocol.GRPC
    insecure: bool = True

    def _signal_endpoint(self, signal: str) -> str:
        if self.protocol is OtlpProtocol.HTTP_PROTOBUF:
            return self.endpoint.rstrip("/") + _HTTP_PATHS[signal]
        return self.endpoint

    def span_exporter(self) -> SpanExporter:
        endpoint = self._signal_endpoint("traces")
        if self.protocol is OtlpProtocol.HTTP_PROTOBUF:
            from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

            return OTLPSpanExporter(endpoint=endpoint)

        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter(endpoint=endpoint, insecure=self.insecure)

    def log_exporter(self) -> LogRecordExporter:
        endpoint = self._signal_endpoint("logs")
        if self.protocol is OtlpProtocol.HTTP_PROTOBUF:
            from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter

            return OTLPLogExporter(endpoint=endpoint)

        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter

        return OTLPLogExporter(endpoint=endpoint, insecure=self.insecure)

    def metric_reader(self, export_interval_millis: float = 60_000) -> MetricReader:
        """Wrap the OTLP metric exporter in a periodic push reader."""
        endpoint = self._signal_endpoint("metrics")
        if self.protocol is OtlpProtocol.HTTP_PROTOBUF:
            from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter

            exporter = OTLPMetricExporter(endpoint=endpoint)
        else:
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

            exporter = OTLPMetricExporter(endpoint=endpoint, insecure=self.insecure)

        return PeriodicExportingMetricReader(exporter, export_interval_millis=export_interval_millis)

    def describe(self) -> Dict[str, Union[str, bool]]:
        return {
            "endpoint": self.endpoint,
            "protocol": self.protocol.value,
            "insecure": self.insecure,
        }


def create_exporter_binding(
    endpoint: str,
    protocol: Union[OtlpProtocol, str] = OtlpProtocol.GRPC,
) -> ExporterBinding:
    """
    Validate a collector address and build the shared binding.

    Args:
        endpoint: Absolute ``http``/``https`` URI of the collector.
        protocol: ``grpc`` or ``http/protobuf``.

    Returns:
        ExporterBinding ready to produce exporters.

    Raises:
        ExporterConfigurationError: If the endpoint is not a usable URI or
            the protocol is unknown.
    """
    try:
        protocol = OtlpProtocol(protocol)
    except ValueError:
        choices = ", ".join(p.value for p in OtlpProtocol)
        raise ExporterConfigurationError(
            f"unsupported OTLP protocol {protocol!r} (expected one of: {choices})"
        ) from None

    if not endpoint or not endpoint.strip():
        raise ExporterConfigurationError("collector endpoint is empty")

    endpoint = endpoint.strip()
    parts = urlsplit(endpoint)
    if parts.scheme not in ("http", "https"):
        raise ExporterConfigurationError(
            f"collector endpoint {endpoint!r} must use the http or https scheme"
        )
    if not parts.hostname:
        raise ExporterConfigurationError(f"collector endpoint {endpoint!r} has no host")
    try:
        parts.port
    except ValueError as exc:
        raise ExporterConfigurationError(
            f"collector endpoint {endpoint!r} has an invalid port"
        ) from exc

    return ExporterBinding(
        endpoint=endpoint,
        protocol=protocol,
        insecure=parts.scheme == "http",
    )
