"""
Tests for the Telemetry Exporter Binding

- endpoint / protocol validation (fatal configuration errors)
- insecure flag derived from the scheme
- exporter factories for gRPC and HTTP/protobuf
- construction never contacts the collector
"""

import pytest
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter as GrpcLogExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter as GrpcSpanExporter
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter as HttpLogExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter as HttpSpanExporter
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

from minimal_otel.observability.exporters import (
    ExporterBinding,
    ExporterConfigurationError,
    OtlpProtocol,
    create_exporter_binding,
)


# ──────────────────────────────────────────────────────────────
# Validation
# ──────────────────────────────────────────────────────────────


class TestCreateExporterBinding:
    """Tests for create_exporter_binding."""

    def test_grpc_default(self) -> None:
        binding = create_exporter_binding("http://splunk-collector:4317")

        assert binding.endpoint == "http://splunk-collector:4317"
        assert binding.protocol is OtlpProtocol.GRPC
        assert binding.insecure is True

    def test_https_is_secure(self) -> None:
        binding = create_exporter_binding("https://collector.example.com:4317", "grpc")
        assert binding.insecure is False

    def test_protocol_from_string(self) -> None:
        binding = create_exporter_binding("http://collector:4318", "http/protobuf")
        assert binding.protocol is OtlpProtocol.HTTP_PROTOBUF

    def test_surrounding_whitespace_is_ignored(self) -> None:
        binding = create_exporter_binding("  http://collector:4317 ")
        assert binding.endpoint == "http://collector:4317"

    def test_unknown_protocol(self) -> None:
        with pytest.raises(ExporterConfigurationError, match="unsupported OTLP protocol"):
            create_exporter_binding("http://collector:4317", "thrift")

    @pytest.mark.parametrize(
        "endpoint",
        [
            "",
            "   ",
            "not a uri",
            "splunk-collector:4317",
            "ftp://collector:4317",
            "http://:4317",
            "http://collector:port",
            "http://collector:99999",
        ],
    )
    def test_malformed_endpoint(self, endpoint: str) -> None:
        with pytest.raises(ExporterConfigurationError):
            create_exporter_binding(endpoint)

    def test_error_is_a_value_error(self) -> None:
        assert issubclass(ExporterConfigurationError, ValueError)

    def test_describe(self) -> None:
        binding = create_exporter_binding("http://collector:4317")
        assert binding.describe() == {
            "endpoint": "http://collector:4317",
            "protocol": "grpc",
            "insecure": True,
        }


# ──────────────────────────────────────────────────────────────
# Exporter factories
# ──────────────────────────────────────────────────────────────


class TestExporterFactories:
    """Exporter construction must succeed even when nothing is listening."""

    def test_grpc_exporters(self) -> None:
        binding = ExporterBinding(endpoint="http://127.0.0.1:1", protocol=OtlpProtocol.GRPC)

        spans = binding.span_exporter()
        logs = binding.log_exporter()
        try:
            assert isinstance(spans, GrpcSpanExporter)
            assert isinstance(logs, GrpcLogExporter)
        finally:
            spans.shutdown()
            logs.shutdown()

    def test_http_exporters_use_signal_paths(self) -> None:
        binding = ExporterBinding(endpoint="http://127.0.0.1:4318/", protocol=OtlpProtocol.HTTP_PROTOBUF)

        spans = binding.span_exporter()
        logs = binding.log_exporter()
        try:
            assert isinstance(spans, HttpSpanExporter)
            assert isinstance(logs, HttpLogExporter)
            assert spans._endpoint == "http://127.0.0.1:4318/v1/traces"
            assert logs._endpoint == "http://127.0.0.1:4318/v1/logs"
        finally:
            spans.shutdown()
            logs.shutdown()

    def test_metric_reader_is_periodic(self) -> None:
        binding = create_exporter_binding("http://127.0.0.1:1")

        reader = binding.metric_reader(export_interval_millis=5_000)
        try:
            assert isinstance(reader, PeriodicExportingMetricReader)
        finally:
            reader.shutdown()
