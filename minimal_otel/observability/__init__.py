"""Observability - Exporter binding, Logging, Tracing, Metrics, and Instrumentation"""
from .exporters import (
    ExporterBinding,
    ExporterConfigurationError,
    OtlpProtocol,
    create_exporter_binding,
)
from .logging import LogEvent, LogSink, Severity, enable_self_log, get_logger, setup_logging
from .tracing import create_resource, setup_tracing
from .metrics import register_runtime_metrics, setup_metrics
from .instrumentation import Instrumentation, instrument

__all__ = [
    "ExporterBinding", "ExporterConfigurationError", "OtlpProtocol", "create_exporter_binding",
    "LogEvent", "LogSink", "Severity", "enable_self_log", "get_logger", "setup_logging",
    "create_resource", "setup_tracing",
    "register_runtime_metrics", "setup_metrics",
    "Instrumentation", "instrument",
]
