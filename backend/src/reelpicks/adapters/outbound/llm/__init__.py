"""LLM backend adapters — one per provider family.

Each adapter is a thin HTTP translation layer.  Selection, failover and
usage accounting live in the dispatch orchestrator, not here.
"""

from __future__ import annotations

from reelpicks.adapters.outbound.llm.base import HttpBackendAdapter, classify_status
from reelpicks.adapters.outbound.llm.gemini import GEMINI_BASE_URL, GeminiAdapter
from reelpicks.adapters.outbound.llm.openrouter import OPENROUTER_BASE_URL, OpenRouterAdapter
from reelpicks.domain.enums import ProviderFamily
from reelpicks.ports.outbound import BackendAdapter


def build_adapters(
    *,
    gemini_api_key: str = "",
    openrouter_api_key: str = "",
    gemini_base_url: str = GEMINI_BASE_URL,
    openrouter_base_url: str = OPENROUTER_BASE_URL,
    timeout_s: float = 60.0,
) -> dict[ProviderFamily, BackendAdapter]:
    """Build one adapter per provider family from settings values.

    Adapters without a key are still returned; the dispatcher skips
    their backends.
    """
    return {
        ProviderFamily.GEMINI: GeminiAdapter(
            gemini_api_key,
            base_url=gemini_base_url,
            timeout=timeout_s,
        ),
        ProviderFamily.OPENROUTER: OpenRouterAdapter(
            openrouter_api_key,
            base_url=openrouter_base_url,
            timeout=timeout_s,
        ),
    }


__all__ = [
    "BackendAdapter",
    "GeminiAdapter",
    "HttpBackendAdapter",
    "OpenRouterAdapter",
    "build_adapters",
    "classify_status",
]
