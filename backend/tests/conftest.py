"""Shared test fixtures."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timezone

import pytest

# Add src to path so imports work
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from reelpicks.domain.enums import AttemptOutcome, ProviderFamily
from reelpicks.ports.outbound import BackendAdapter
from reelpicks.shared.providers.ledger import UsageLedger
from reelpicks.shared.providers.types import AdapterResult, BackendDescriptor


class FakeClock:
    """Wall clock under test control (seconds since the epoch)."""

    def __init__(self, start: datetime) -> None:
        self.now = start.timestamp()

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedAdapter(BackendAdapter):
    """Adapter that replays canned outcomes per model and records calls."""

    def __init__(
        self,
        family: ProviderFamily,
        script: dict[str, list[AdapterResult]] | None = None,
        *,
        default: AdapterResult | None = None,
        configured: bool = True,
    ) -> None:
        self.family = family
        self._script = {k: list(v) for k, v in (script or {}).items()}
        self._default = default or AdapterResult(AttemptOutcome.RATE_LIMITED)
        self._configured = configured
        self.calls: list[dict[str, str]] = []
        self.closed = False

    @property
    def is_configured(self) -> bool:
        return self._configured

    def script(self, model: str, *results: AdapterResult) -> None:
        self._script.setdefault(model, []).extend(results)

    async def invoke(self, *, system_prompt: str, user_prompt: str, model: str) -> AdapterResult:
        self.calls.append(
            {"model": model, "system_prompt": system_prompt, "user_prompt": user_prompt}
        )
        queue = self._script.get(model)
        if queue:
            return queue.pop(0)
        return self._default

    async def close(self) -> None:
        self.closed = True

    @property
    def called_models(self) -> list[str]:
        return [c["model"] for c in self.calls]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger(clock: FakeClock) -> UsageLedger:
    return UsageLedger(clock=clock)


@pytest.fixture
def catalog() -> list[BackendDescriptor]:
    return [
        BackendDescriptor("alpha", daily_budget=20, minute_budget=5, family=ProviderFamily.GEMINI),
        BackendDescriptor("beta", daily_budget=100, minute_budget=30, family=ProviderFamily.OPENROUTER),
        BackendDescriptor("gamma", daily_budget=50, minute_budget=10, family=ProviderFamily.GEMINI),
    ]


def make_recommendation(idx: int, **overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "id": f"tt{1000000 + idx}",
        "title": f"Film {idx}",
        "year": 2000 + idx,
        "director": f"Director {idx}",
        "genres": ["Drama", "Thriller"],
        "explanation": f"Reason {idx}",
        "type": "movie",
    }
    record.update(overrides)
    return record
