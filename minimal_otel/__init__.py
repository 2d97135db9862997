"""Minimal OpenTelemetry App - FastAPI service shipping logs, metrics and traces over OTLP"""

__version__ = "1.0.0"
