"""Structured logging setup and per-request logging."""

import logging
import sys
import time
import uuid
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from clinic_scheduler.config import settings

# Scrape and liveness traffic is neither logged nor measured
QUIET_PATHS = frozenset({"/metrics", f"{settings.api_v1_prefix}/ping"})


def configure_logging() -> None:
    """Route structlog through stdlib logging, as JSON or console lines."""
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log line emitted while handling a request.

    The id comes from ``X-Request-ID`` when the caller sends one, so the
    appointment and notification events of one API call can be correlated.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        logger = structlog.get_logger()

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed", error=str(e), duration=time.perf_counter() - start_time
            )
            raise

        duration = time.perf_counter() - start_time
        logger.info("request_completed", status_code=response.status_code, duration=duration)

        response.headers["X-Process-Time"] = f"{duration:.6f}"
        response.headers["X-Request-ID"] = request_id
        return response
