"""Domain-specific exception hierarchy.

All exceptions inherit from ``DomainError`` so callers can catch the entire
family in one clause while still discriminating on subclass.
"""

from __future__ import annotations

from reelpicks.domain.enums import FailureKind


class DomainError(Exception):
    """Base class for all domain-layer errors."""

    def __init__(self, message: str, *, code: str = "DOMAIN_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# ── Validation ───────────────────────────────────────────────
class ValidationError(DomainError):
    """Input failed domain validation rules."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="VALIDATION_ERROR")


# ── Recommendation generation ────────────────────────────────
class RecommendationError(DomainError):
    """A recommendation request could not be fulfilled.

    ``retry_after_seconds`` is only set when retrying later is expected
    to help (all backends exhausted).
    """

    kind: FailureKind = FailureKind.NETWORK_ERROR

    def __init__(self, message: str, *, retry_after_seconds: int | None = None) -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message, code=self.kind.value)


class ConfigError(RecommendationError):
    """No usable provider credentials are configured."""

    kind = FailureKind.CONFIG_ERROR

    def __init__(self, message: str = "AI service not configured") -> None:
        super().__init__(message)


class AllModelsExhaustedError(RecommendationError):
    """Every backend is ineligible or failed recoverably within the attempt ceiling."""

    kind = FailureKind.ALL_MODELS_EXHAUSTED

    def __init__(
        self,
        message: str = "All AI models are currently rate limited. Please try again later.",
        *,
        retry_after_seconds: int = 60,
        errors: dict[str, str] | None = None,
    ) -> None:
        self.errors = errors or {}
        super().__init__(message, retry_after_seconds=retry_after_seconds)


class InvalidResponseError(RecommendationError):
    """A backend answered but nothing usable could be parsed or salvaged."""

    kind = FailureKind.INVALID_RESPONSE

    def __init__(self, message: str = "Failed to parse AI response") -> None:
        super().__init__(message)


class NetworkError(RecommendationError):
    """The call to a backend itself broke (transport or protocol failure)."""

    kind = FailureKind.NETWORK_ERROR

    def __init__(self, message: str = "AI generation failed", *, backend: str | None = None) -> None:
        self.backend = backend
        super().__init__(message)
