"""Outbound ports — interfaces that infrastructure adapters must implement.

The orchestrator depends only on ``BackendAdapter``; adding a provider
family means adding an adapter, never touching the dispatch loop.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from reelpicks.domain.enums import ProviderFamily
from reelpicks.shared.providers.types import AdapterResult


class BackendAdapter(ABC):
    """Translates "generate recommendations from a prompt" into one provider's wire call."""

    family: ProviderFamily

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when the adapter has the credentials it needs."""

    @abstractmethod
    async def invoke(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        model: str,
    ) -> AdapterResult:
        """Call ``model`` and classify the outcome.

        Provider errors are reported through ``AdapterResult.outcome``,
        never raised.
        """

    async def close(self) -> None:  # noqa: B027
        """Release any underlying connections."""
