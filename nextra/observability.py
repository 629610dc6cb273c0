"""
nextra/observability.py

Structured logging and request correlation for the Nextra backend.

Contains:
- configure_logging: structlog over stdlib logging (console in dev, JSON elsewhere)
- get_logger: module-level structured logger
- correlation_id_middleware: binds X-Correlation-Id to every log line of a request

Every log line emitted while a request is being handled carries the request's
correlation id, so a 500 seen by a client can be traced to its server-side traceback.
"""

from __future__ import annotations

import logging
import sys
import time
import uuid

import structlog
from fastapi import Request
from starlette.responses import Response

from nextra.config import IS_DEV, LOG_LEVEL
from nextra.errors import internal_error_response

CORRELATION_ID_HEADER = "X-Correlation-Id"

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------
def configure_logging(level: str = LOG_LEVEL) -> None:
    """
    Configure stdlib logging and structlog processors.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    logging.getLogger("uvicorn.access").propagate = False

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]
    if IS_DEV:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.extend([structlog.processors.format_exc_info, structlog.processors.JSONRenderer()])

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# ---------------------------------------------------------
# Correlation id middleware
# ---------------------------------------------------------
def new_correlation_id() -> str:
    return str(uuid.uuid4())


async def correlation_id_middleware(request: Request, call_next) -> Response:
    """
    HTTP middleware: propagate or generate the correlation id.

    Unhandled exceptions are logged here with their traceback and turned into
    the generic 500 envelope, so the client never sees internal detail.
    """
    correlation_id = request.headers.get(CORRELATION_ID_HEADER) or new_correlation_id()
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("unhandled_error", method=request.method, path=request.url.path)
        response = internal_error_response()

    response.headers[CORRELATION_ID_HEADER] = correlation_id
    logger.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    structlog.contextvars.clear_contextvars()
    return response
