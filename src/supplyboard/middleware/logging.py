"""Request logging, structlog setup and HTTP metrics."""

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

from supplyboard.config import Settings

REQUEST_ID_HEADER = "X-Request-ID"

# Route prefix -> API surface reported in logs and metrics
SURFACES = (
    ("/api/weather", "weather"),
    ("/api/dashboard", "dashboard"),
    ("/api/", "business"),
    ("/health", "health"),
    ("/metrics", "metrics"),
)

http_requests = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "surface", "path", "status"],
)
http_duration = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "surface", "path"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


def configure_logging(settings: Settings) -> None:
    """Configure structlog from ``LOG_LEVEL`` and ``LOG_FORMAT``."""
    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    log_level = logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def surface_for(path: str) -> str:
    for prefix, surface in SURFACES:
        if path.startswith(prefix):
            return surface
    return "site"


def _route_path(request: Request) -> str:
    """Path template of the matched route, so entity ids stay out of metric labels."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request id to the log context and records per-route metrics.

    An incoming ``X-Request-ID`` is reused so ids can be followed across
    services; otherwise a short random id is generated. The id is echoed on
    the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        surface = surface_for(request.url.path)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            surface=surface,
        )

        logger = structlog.get_logger()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed with exception",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            http_requests.labels(
                method=request.method,
                surface=surface,
                path=_route_path(request),
                status="500",
            ).inc()
            raise

        duration = time.perf_counter() - start_time
        path = _route_path(request)

        http_requests.labels(
            method=request.method,
            surface=surface,
            path=path,
            status=str(response.status_code),
        ).inc()
        http_duration.labels(method=request.method, surface=surface, path=path).observe(duration)

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "Request completed",
            status_code=response.status_code,
            route=path,
            duration_ms=round(duration * 1000, 2),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
