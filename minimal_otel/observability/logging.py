"""
Structured Logging - structlog to the console and to the OTLP collector

Every log call in the process ends up on the standard library root logger,
which carries two handlers:

    console    : structlog ProcessorFormatter on stdout (JSON in production,
                 key/value console lines in development)
    collector  : OpenTelemetry LoggingHandler feeding a batched OTLP exporter

SDK self-diagnostics (failed exports, dropped records) are kept apart on
stderr so they can never feed back into the collector pipeline.
"""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import IntEnum
from typing import IO, Any, Dict, Mapping, Optional

import structlog
from opentelemetry.instrumentation.logging.handler import LoggingHandler
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource

from ..core.config import Settings
from .exporters import ExporterBinding

DIAGNOSTICS_LOGGER = "minimal_otel.diagnostics"
SINK_LOGGER = "minimal_otel"

_OTEL_NAMESPACE = "opentelemetry"
_CONSOLE_HANDLER = "minimal_otel.console"
_COLLECTOR_HANDLER = "minimal_otel.collector"
_SELF_LOG_HANDLER = "minimal_otel.selflog"

# Names a template field cannot use as a LogRecord attribute / structlog kwarg
_RESERVED_FIELD_NAMES = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "event",
    "level",
    "extra",
    "stacklevel",
    "message_template",
}

_diagnostics = logging.getLogger(DIAGNOSTICS_LOGGER)


# ──────────────────────────────────────────────────────────────
# Log events
# ──────────────────────────────────────────────────────────────


class Severity(IntEnum):
    DEBUG = logging.DEBUG
    INFORMATION = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def _now() -> datetime:
    return datetime.now().astimezone()


def _attribute_value(value: Any) -> Any:
    """Coerce a field value into something an OTLP attribute can carry."""
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class LogEvent:
    """
    A single log call: a message template plus the values bound to it.

    Attributes:
        template: Message with named placeholders, e.g. "Background log at {Time}".
        fields: Placeholder name -> value.
        severity: Log level of the event.
        timestamp: When the event was created (local, timezone-aware).
    """

    template: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    severity: Severity = Severity.INFORMATION
    timestamp: datetime = field(default_factory=_now)

    def render(self) -> str:
        """Fill the template. Placeholders without a field are left as written."""
        try:
            return self.template.format_map(_KeepMissing(self.fields))
        except (ValueError, IndexError, KeyError, AttributeError, TypeError):
            return self.template

    def attributes(self) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {"message_template": self.template}
        for name, value in self.fields.items():
            key = f"field.{name}" if name in _RESERVED_FIELD_NAMES else name
            attrs[key] = _attribute_value(value)
        return attrs


# ──────────────────────────────────────────────────────────────
# Sink
# ──────────────────────────────────────────────────────────────


class LogSink:
    """
    Process-wide emission point handed to every component that logs.

    ``emit`` never raises: a failure is written to the diagnostics logger
    and the call returns None.
    """

    def __init__(
        self,
        logger_provider: Optional[LoggerProvider] = None,
        collector_handler: Optional[logging.Handler] = None,
        name: str = SINK_LOGGER,
    ) -> None:
        self._logger = structlog.get_logger(name)
        self._logger_provider = logger_provider
        self._collector_handler = collector_handler
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, severity: Severity, template: str, **fields: Any) -> Optional[LogEvent]:
        try:
            event = LogEvent(template=template, fields=fields, severity=Severity(severity))
            self._logger.log(int(event.severity), event.render(), **event.attributes())
        except Exception:
            _diagnostics.exception("log sink failed to emit %r", template)
            return None
        return event

    def info(self, template: str, **fields: Any) -> Optional[LogEvent]:
        return self.emit(Severity.INFORMATION, template, **fields)

    def flush_and_close(self) -> bool:
        """
        Push buffered records to the collector and release the exporter.

        Only the first call does anything; it returns True, later calls
        return False. Afterwards events still reach the console.
        """
        with self._lock:
            if self._closed:
                return False
            self._closed = True

        if self._collector_handler is not None:
            logging.getLogger().removeHandler(self._collector_handler)
            self._collector_handler.close()

        if self._logger_provider is not None:
            self._logger_provider.force_flush()
            self._logger_provider.shutdown()

        for handler in logging.getLogger().handlers:
            handler.flush()
        return True


# ──────────────────────────────────────────────────────────────
# Setup
# ──────────────────────────────────────────────────────────────


def _replace_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    for existing in list(logger.handlers):
        if existing.get_name() == handler.get_name():
            logger.removeHandler(existing)
            existing.close()
    logger.addHandler(handler)


def enable_self_log(stream: Optional[IO[str]] = None) -> None:
    """Send SDK and sink diagnostics to stderr, outside the collector pipeline."""
    formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    for namespace in (_OTEL_NAMESPACE, DIAGNOSTICS_LOGGER):
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.set_name(_SELF_LOG_HANDLER)
        handler.setFormatter(formatter)

        diag = logging.getLogger(namespace)
        _replace_handler(diag, handler)
        diag.propagate = False


def _console_formatter(settings: Settings) -> logging.Formatter:
    if settings.is_production:
        # JSON output for production
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=False)]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )


def setup_logging(
    settings: Settings,
    binding: Optional[ExporterBinding] = None,
    resource: Optional[Resource] = None,
) -> LogSink:
    """
    Configure structured logging and return the shared sink.

    structlog renders into standard library records so that uvicorn's and
    the SDK's loggers share the same handlers. Without a binding only the
    console handler is installed.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper()))

    console = logging.StreamHandler(sys.stdout)
    console.set_name(_CONSOLE_HANDLER)
    console.setFormatter(_console_formatter(settings))
    _replace_handler(root, console)

    enable_self_log()

    if binding is None:
        return LogSink()

    logger_provider = LoggerProvider(resource=resource or Resource.create({"service.name": settings.service_name}))
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(binding.log_exporter()))

    collector = LoggingHandler(level=logging.NOTSET, logger_provider=logger_provider)
    collector.set_name(_COLLECTOR_HANDLER)
    _replace_handler(root, collector)

    return LogSink(logger_provider=logger_provider, collector_handler=collector)


def get_logger(name: str = None):
    """Get a structlog logger"""
    return structlog.get_logger(name or __name__)
