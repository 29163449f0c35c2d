"""FastAPI middleware stack — request ID, access log, HTTP metrics.

Route handlers and exception handlers leave dispatch details on
``request.state`` (``backend``, ``attempts``, ``failure_kind``); the
access log line carries them so one line per request tells which model
answered, after how many attempts, or why nothing did.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable, Awaitable
from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from reelpicks.shared.observability.metrics import HTTP_REQUEST_DURATION, HTTP_REQUESTS_TOTAL

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_DISPATCH_STATE = ("backend", "attempts", "failure_kind")


def record_dispatch(request: Request, **details: Any) -> None:
    """Stash dispatch details for the access log."""
    for key, value in details.items():
        if key in _DISPATCH_STATE and value is not None:
            setattr(request.state, key, value)


def _dispatch_details(request: Request) -> dict[str, Any]:
    return {
        key: getattr(request.state, key)
        for key in _DISPATCH_STATE
        if hasattr(request.state, key)
    }


def _route_template(request: Request) -> str:
    """Matched route path (``/api/v1/providers/usage``), or ``unmatched``."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Binds a request ID to the structlog context and echoes it back."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """One access-log line per request, with dispatch details when present."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 2)

        log = logger.bind(
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=duration_ms,
            **_dispatch_details(request),
        )
        if response.status_code >= 500:
            log.warning("http_request")
        else:
            log.info("http_request")
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Prometheus request counters labelled by route template."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        endpoint = _route_template(request)

        HTTP_REQUESTS_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(time.monotonic() - start)
        return response
