"""Data Transfer Objects — Pydantic models for API boundaries.

Field names follow the JSON the web client already speaks (camelCase
``searchTitle``, ``errorType``, ``retryAfter``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from reelpicks.domain.entities import RecommendationResult
from reelpicks.domain.enums import ContentKind, Language


# ═══════════════════════════════════════════════════════════════
#  Common
# ═══════════════════════════════════════════════════════════════
class ErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error: str
    error_type: str | None = Field(None, alias="errorType")
    retry_after: int | None = Field(None, alias="retryAfter")


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    environment: str = "development"
    backends: dict[str, bool] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════
#  Recommendations
# ═══════════════════════════════════════════════════════════════
class RecommendationRequest(BaseModel):
    prompt: str = ""
    language: str = Language.GREEK.value


class RecommendationOut(BaseModel):
    id: str
    title: str
    year: int | float
    director: str
    genres: list[str]
    explanation: str
    type: ContentKind


class RecommendationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recommendations: list[RecommendationOut]
    search_title: str | None = Field(None, alias="searchTitle")

    @classmethod
    def from_result(cls, result: RecommendationResult) -> RecommendationResponse:
        return cls(
            recommendations=[RecommendationOut(**r.to_dict()) for r in result.recommendations],
            search_title=result.search_title,
        )


# ═══════════════════════════════════════════════════════════════
#  Backend usage
# ═══════════════════════════════════════════════════════════════
class BackendUsageOut(BaseModel):
    backend: str
    daily_count: int
    daily_budget: int
    minute_count: int
    minute_budget: int
    in_flight: int
    exhausted: bool
    cooldown_remaining_s: float
    permanently_disabled: bool
    eligible: bool
