"""Global exception handlers — map domain errors to HTTP responses."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse
import structlog

from reelpicks.domain.enums import FailureKind
from reelpicks.domain.exceptions import (
    AllModelsExhaustedError,
    DomainError,
    NetworkError,
    RecommendationError,
    ValidationError,
)
from reelpicks.shared.middleware import record_dispatch

logger = structlog.get_logger(__name__)

FAILURE_STATUS: dict[FailureKind, int] = {
    FailureKind.CONFIG_ERROR: 503,
    FailureKind.ALL_MODELS_EXHAUSTED: 503,
    FailureKind.INVALID_RESPONSE: 500,
    FailureKind.NETWORK_ERROR: 502,
}


def failure_body(exc: RecommendationError) -> dict[str, Any]:
    body: dict[str, Any] = {"error": exc.message, "errorType": exc.kind.value}
    if exc.retry_after_seconds is not None:
        body["retryAfter"] = exc.retry_after_seconds
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Register all domain→HTTP exception mappings."""

    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError) -> ORJSONResponse:
        return ORJSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RecommendationError)
    async def handle_recommendation(
        request: Request, exc: RecommendationError
    ) -> ORJSONResponse:
        status_code = FAILURE_STATUS.get(exc.kind, 500)
        record_dispatch(
            request,
            failure_kind=exc.kind.value,
            backend=exc.backend if isinstance(exc, NetworkError) else None,
            attempts=len(exc.errors) if isinstance(exc, AllModelsExhaustedError) else None,
        )
        logger.warning(
            "recommendation_failed_http",
            kind=exc.kind.value,
            message=exc.message,
            status=status_code,
        )
        headers = None
        if exc.retry_after_seconds is not None:
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        return ORJSONResponse(
            status_code=status_code,
            content=failure_body(exc),
            headers=headers,
        )

    @app.exception_handler(DomainError)
    async def handle_domain(request: Request, exc: DomainError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=400,
            content={"error": exc.message, "errorType": exc.code},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("unhandled_exception", error=str(exc))
        return ORJSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "errorType": FailureKind.NETWORK_ERROR.value,
            },
        )
