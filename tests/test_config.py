"""
Tests for Application Settings

- defaults for the collector endpoint, protocol and heartbeat
- environment variable overrides
- validation of log level and heartbeat interval
"""

import pytest
from pydantic import ValidationError

from minimal_otel.core.config import Settings


def test_defaults():
    settings = Settings()

    assert settings.otlp_endpoint == "http://splunk-collector:4317"
    assert settings.otlp_protocol == "grpc"
    assert settings.heartbeat_interval_seconds == 5.0
    assert settings.log_level == "INFO"
    assert settings.is_production is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("OTLP_ENDPOINT", "https://otel.internal:4317")
    monkeypatch.setenv("OTLP_PROTOCOL", "http/protobuf")
    monkeypatch.setenv("SERVICE_NAME", "hello-svc")
    monkeypatch.setenv("HEARTBEAT_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("ENV", "production")

    settings = Settings()

    assert settings.otlp_endpoint == "https://otel.internal:4317"
    assert settings.otlp_protocol == "http/protobuf"
    assert settings.service_name == "hello-svc"
    assert settings.heartbeat_interval_seconds == 2.5
    assert settings.is_production is True


def test_fields_accept_python_names():
    settings = Settings(service_name="by-name", api_port=9000)
    assert settings.service_name == "by-name"
    assert settings.api_port == 9000


def test_log_level_is_normalised():
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_unknown_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


@pytest.mark.parametrize("interval", [0, -1.0])
def test_heartbeat_interval_must_be_positive(interval):
    with pytest.raises(ValidationError):
        Settings(heartbeat_interval_seconds=interval)
