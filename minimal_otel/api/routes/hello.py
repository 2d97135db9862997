"""
Hello Route - the single endpoint of the service

    GET /  ->  200 "Hello OpenTelemetry!" (text/plain)

Each call writes one informational log line; request spans and duration
metrics come from the FastAPI instrumentation.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ...observability.logging import LogSink
from ..dependencies import get_log_sink

GREETING = "Hello OpenTelemetry!"

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def hello(sink: LogSink = Depends(get_log_sink)) -> str:
    sink.info(GREETING)
    return GREETING
