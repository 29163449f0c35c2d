"""Health, Recommendations, Backend usage — REST routers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from reelpicks.application.dtos import (
    BackendUsageOut,
    ErrorResponse,
    HealthResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from reelpicks.application.services import RecommendationService
from reelpicks.config import Settings
from reelpicks.dependencies import get_cached_settings, get_recommendation_service
from reelpicks.shared.middleware import record_dispatch


def provide_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_cached_settings()


def provide_recommendation_service(
    settings: Settings = Depends(provide_settings),
) -> RecommendationService:
    return get_recommendation_service(settings)


# ═══════════════════════════════════════════════════════════════
#  Health
# ═══════════════════════════════════════════════════════════════
health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(provide_settings),
    service: RecommendationService = Depends(provide_recommendation_service),
) -> HealthResponse:
    orchestrator = service.orchestrator
    usable = {b.name for b in orchestrator.selector.usable_catalog}
    return HealthResponse(
        status="ok" if usable else "degraded",
        environment=settings.app_env.value,
        backends={b.name: b.name in usable for b in orchestrator.selector.catalog},
    )


@health_router.get("/metrics")
async def prometheus_metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


# ═══════════════════════════════════════════════════════════════
#  Recommendations
# ═══════════════════════════════════════════════════════════════
recommendations_router = APIRouter(tags=["Recommendations"])


@recommendations_router.post(
    "/recommendations",
    response_model=RecommendationResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def generate_recommendations(
    body: RecommendationRequest,
    request: Request,
    service: RecommendationService = Depends(provide_recommendation_service),
) -> RecommendationResponse:
    result = await service.generate_recommendations(body.prompt, body.language)
    record_dispatch(request, backend=result.backend, attempts=result.attempts)
    return RecommendationResponse.from_result(result)


# ═══════════════════════════════════════════════════════════════
#  Backend usage
# ═══════════════════════════════════════════════════════════════
providers_router = APIRouter(prefix="/providers", tags=["Backend Usage"])


@providers_router.get("/usage", response_model=list[BackendUsageOut])
async def backend_usage(
    service: RecommendationService = Depends(provide_recommendation_service),
) -> list[BackendUsageOut]:
    """Per-backend usage snapshot, in catalog (priority) order."""
    return [
        BackendUsageOut(
            backend=u.backend,
            daily_count=u.daily_count,
            daily_budget=u.daily_budget,
            minute_count=u.minute_count,
            minute_budget=u.minute_budget,
            in_flight=u.in_flight,
            exhausted=u.exhausted,
            cooldown_remaining_s=u.cooldown_remaining_s,
            permanently_disabled=u.permanently_disabled,
            eligible=u.eligible,
        )
        for u in service.orchestrator.get_usage()
    ]

