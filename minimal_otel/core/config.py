"""
Application Configuration - Environment-based settings

Uses Pydantic Settings for type-safe configuration.
Every value can be overridden with an environment variable or a .env file;
nothing is re-read after startup.
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .. import __version__


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Fields accept either their Python name or the environment alias,
    e.g. ``Settings(otlp_endpoint=...)`` and ``OTLP_ENDPOINT=...``.
    """

    # ─────────────────────────────────────────────
    # Application
    # ─────────────────────────────────────────────
    service_name: str = Field(default="MinimalOtelApp", alias="SERVICE_NAME")
    service_version: str = Field(default=__version__, alias="SERVICE_VERSION")
    environment: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # ─────────────────────────────────────────────
    # Observability
    # ─────────────────────────────────────────────
    otlp_endpoint: str = Field(
        default="http://splunk-collector:4317",
        alias="OTLP_ENDPOINT",
        description="Collector address shared by the logs, metrics and traces exporters.",
    )
    otlp_protocol: str = Field(
        default="grpc",
        alias="OTLP_PROTOCOL",
        description="OTLP transport: 'grpc' or 'http/protobuf'.",
    )
    metric_export_interval_ms: int = Field(
        default=60_000,
        ge=1_000,
        alias="METRIC_EXPORT_INTERVAL_MS",
        description="How often the periodic reader pushes metrics to the collector.",
    )

    # ─────────────────────────────────────────────
    # Heartbeat
    # ─────────────────────────────────────────────
    heartbeat_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        alias="HEARTBEAT_INTERVAL_SECONDS",
        description="Pause between two background heartbeat log lines.",
    )

    # ─────────────────────────────────────────────
    # API
    # ─────────────────────────────────────────────
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, ge=1, le=65535, alias="API_PORT")

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True


# Global settings instance
settings = Settings()
