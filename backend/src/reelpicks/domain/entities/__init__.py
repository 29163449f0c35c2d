"""Domain entities — recommendation records and the result handed to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from reelpicks.domain.enums import ContentKind


# ═══════════════════════════════════════════════════════════════
#  Recommendation
# ═══════════════════════════════════════════════════════════════
@dataclass(slots=True)
class RecommendationRecord:
    """A single movie or series suggested by a backend model."""

    id: str
    title: str
    year: int | float
    type: ContentKind
    director: str = "Unknown"
    genres: list[str] = field(default_factory=list)
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "year": self.year,
            "director": self.director,
            "genres": list(self.genres),
            "explanation": self.explanation,
            "type": self.type.value,
        }


@dataclass(slots=True)
class RecommendationResult:
    """Validated output of one recommendation request."""

    recommendations: list[RecommendationRecord] = field(default_factory=list)
    search_title: str | None = None

    # Diagnostics
    backend: str | None = None
    attempts: int = 0
    salvaged: bool = False
