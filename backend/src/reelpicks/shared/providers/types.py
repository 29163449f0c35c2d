"""Core types for the multi-backend routing framework."""

from __future__ import annotations

from dataclasses import dataclass

from reelpicks.domain.enums import AttemptOutcome, ProviderFamily


@dataclass(frozen=True)
class BackendDescriptor:
    """Static configuration for a single model backend.

    Catalog order is priority order: earlier entries win whenever they
    are eligible.

    Attributes:
        name:          Unique identifier, also the provider's model id.
        daily_budget:  Max calls per UTC calendar day.
        minute_budget: Max calls per trailing 60 seconds.
        family:        Adapter protocol the backend requires.
    """

    name: str
    daily_budget: int
    minute_budget: int
    family: ProviderFamily

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("backend name must not be empty")
        if self.daily_budget <= 0 or self.minute_budget <= 0:
            raise ValueError(f"budgets for {self.name!r} must be positive integers")


DEFAULT_CATALOG: tuple[BackendDescriptor, ...] = (
    BackendDescriptor("gemini-2.5-flash", 20, 5, ProviderFamily.GEMINI),
    BackendDescriptor("google/gemma-3-27b-it:free", 14400, 30, ProviderFamily.OPENROUTER),
    BackendDescriptor("xiaomi/mimo-v2-flash:free", 1000, 20, ProviderFamily.OPENROUTER),
    BackendDescriptor("gemini-2.5-flash-lite", 20, 10, ProviderFamily.GEMINI),
)


def validate_catalog(catalog: list[BackendDescriptor] | tuple[BackendDescriptor, ...]) -> None:
    """Reject empty catalogs and duplicate backend names."""
    if not catalog:
        raise ValueError("backend catalog must contain at least one entry")
    seen: set[str] = set()
    for backend in catalog:
        if backend.name in seen:
            raise ValueError(f"duplicate backend name in catalog: {backend.name!r}")
        seen.add(backend.name)


@dataclass(frozen=True)
class AdapterResult:
    """What an adapter reports back for one invocation."""

    outcome: AttemptOutcome
    text: str = ""
    error: str | None = None
    status_code: int | None = None

    @classmethod
    def success(cls, text: str) -> AdapterResult:
        # Blank bodies are never a legitimate success.
        if not text or not text.strip():
            return cls(AttemptOutcome.EMPTY_RESPONSE)
        return cls(AttemptOutcome.SUCCESS, text=text)


@dataclass
class DispatchAttempt:
    """One call into one backend within a single request."""

    backend: str
    outcome: AttemptOutcome
    text: str | None = None
    error: str | None = None
    latency_ms: float = 0.0


@dataclass
class DispatchResult:
    """Raw text from the backend that succeeded, plus the attempt trail."""

    backend: str
    text: str
    attempts: list[DispatchAttempt]


@dataclass
class UsageSnapshot:
    """Read-only view of one backend's usage."""

    backend: str
    daily_count: int
    daily_budget: int
    minute_count: int
    minute_budget: int
    in_flight: int = 0
    exhausted: bool = False
    cooldown_remaining_s: float = 0.0
    permanently_disabled: bool = False
    eligible: bool = True
