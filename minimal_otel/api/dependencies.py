"""
Request Dependencies - components injected through ``app.state``
"""

from fastapi import Request

from ..observability.logging import LogSink


def get_log_sink(request: Request) -> LogSink:
    """The logging sink built by ``create_app`` for this application."""
    return request.app.state.log_sink
