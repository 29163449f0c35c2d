"""Dependency wiring — builds the process-wide ledger, adapters and service.

The ledger is created once and handed to the orchestrator explicitly;
nothing else holds usage state.
"""

from __future__ import annotations

from functools import lru_cache

from reelpicks.adapters.outbound.llm import build_adapters
from reelpicks.application.services import RecommendationService
from reelpicks.config import Settings, get_settings
from reelpicks.domain.enums import ProviderFamily
from reelpicks.ports.outbound import BackendAdapter
from reelpicks.shared.providers.gateway import DispatchOrchestrator
from reelpicks.shared.providers.ledger import UsageLedger


# ── Settings ─────────────────────────────────────────────────
@lru_cache(maxsize=1)
def get_cached_settings() -> Settings:
    return get_settings()


# ── Singletons ───────────────────────────────────────────────
_ledger: UsageLedger | None = None
_adapters: dict[ProviderFamily, BackendAdapter] | None = None
_service: RecommendationService | None = None


def get_ledger(settings: Settings | None = None) -> UsageLedger:
    global _ledger
    if _ledger is None:
        s = settings or get_cached_settings()
        _ledger = UsageLedger(cooldown_seconds=s.cooldown_seconds)
    return _ledger


def get_adapters(settings: Settings | None = None) -> dict[ProviderFamily, BackendAdapter]:
    global _adapters
    if _adapters is None:
        s = settings or get_cached_settings()
        _adapters = build_adapters(
            gemini_api_key=s.gemini_api_key,
            openrouter_api_key=s.openrouter_api_key,
            gemini_base_url=s.gemini_base_url,
            openrouter_base_url=s.openrouter_base_url,
            timeout_s=s.provider_timeout_seconds,
        )
    return _adapters


def get_recommendation_service(settings: Settings | None = None) -> RecommendationService:
    """Create or return the singleton recommendation service."""
    global _service
    if _service is None:
        s = settings or get_cached_settings()
        orchestrator = DispatchOrchestrator(
            s.backend_catalog(),
            get_ledger(s),
            get_adapters(s),
            max_attempts=s.max_attempts,
            retry_after_seconds=s.retry_after_seconds,
        )
        _service = RecommendationService(orchestrator)
    return _service


async def close_adapters() -> None:
    global _adapters
    if _adapters is None:
        return
    for adapter in _adapters.values():
        await adapter.close()
    _adapters = None


def reset_dependencies() -> None:
    """Drop every singleton (tests and app re-creation)."""
    global _ledger, _adapters, _service
    _ledger = None
    _adapters = None
    _service = None
