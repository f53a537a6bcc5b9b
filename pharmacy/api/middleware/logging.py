"""Structured logging middleware for FastAPI."""

import logging
import time
import uuid
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

# Polled by health probes
QUIET_PATHS = frozenset({"/v1/liveness", "/v1/readiness"})


def _configure(renderer, timestamp_format: str = "iso") -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt=timestamp_format),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]
    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# JSON by default; setup_logging() reconfigures at startup
_configure(structlog.processors.JSONRenderer())

logger = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request ID to every log line and logs each request's outcome.

    Probe paths are logged at debug level. Client and server errors are
    logged as warnings.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Reuse a caller-supplied request ID
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        path = request.url.path
        log = logger.bind(
            request_id=request_id,
            method=request.method,
            path=path,
            client_ip=request.client.host if request.client else None,
        )
        emit = log.debug if path in QUIET_PATHS else log.info

        emit("request_received", query_params=dict(request.query_params))

        started = time.perf_counter()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        except Exception as exc:
            log.error(
                "request_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                duration_ms=_elapsed_ms(started),
                exc_info=True,
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        outcome = log.warning if response.status_code >= 400 else emit
        outcome(
            "request_completed",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure stdlib logging and structlog.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        log_format: ``json`` for production, ``console`` for a coloured dev renderer
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(message)s",
    )

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
        timestamp_format = "%Y-%m-%d %H:%M:%S"
    else:
        renderer = structlog.processors.JSONRenderer()
        timestamp_format = "iso"

    _configure(renderer, timestamp_format)
