"""
Minimal OpenTelemetry App - Main Entry Point

CLI interface for running the server and checking configuration.
"""

import argparse
import sys
from typing import Optional, Sequence


def run_server(host: Optional[str] = None, port: Optional[int] = None, settings=None):
    """Build the application, then hand it to uvicorn.

    Configuration errors are raised from ``create_app`` before uvicorn is
    started, so no connection is ever accepted with a broken setup.
    """
    import uvicorn
    from minimal_otel.api.main import create_app
    from minimal_otel.core.config import settings as default_settings

    settings = settings or default_settings
    app = create_app(settings)

    # log_config=None keeps uvicorn's loggers on the root handlers (console + collector)
    uvicorn.run(
        app,
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


def show_config(settings=None) -> int:
    """Print the resolved configuration; non-zero if the exporter binding is invalid"""
    from minimal_otel.core.config import settings as default_settings
    from minimal_otel.observability.exporters import (
        ExporterConfigurationError,
        create_exporter_binding,
    )

    settings = settings or default_settings

    print(f"Service:     {settings.service_name} {settings.service_version} ({settings.environment})")
    print(f"Log level:   {settings.log_level}")
    print(f"Heartbeat:   every {settings.heartbeat_interval_seconds:g}s")
    print(f"Listen:      {settings.api_host}:{settings.api_port}")

    try:
        binding = create_exporter_binding(settings.otlp_endpoint, settings.otlp_protocol)
    except ExporterConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    described = binding.describe()
    print(f"Collector:   {described['endpoint']} ({described['protocol']}, insecure={described['insecure']})")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Minimal OpenTelemetry App")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Server command
    server_parser = subparsers.add_parser("server", help="Run the HTTP server")
    server_parser.add_argument("--host", type=str, default=None, help="Bind address")
    server_parser.add_argument("--port", type=int, default=None, help="Bind port")

    # Config command
    subparsers.add_parser("config", help="Show and validate configuration")

    args = parser.parse_args(argv)

    if args.command == "server":
        from minimal_otel.observability.exporters import ExporterConfigurationError

        try:
            run_server(args.host, args.port)
        except ExporterConfigurationError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        return 0
    elif args.command == "config":
        return show_config()
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
