"""Usage ledger — tracks per-minute and per-day call budgets per backend.

The minute budget uses a sliding window: events older than the window
are evicted before every read, so the budget self-replenishes over time.
The day budget resets on the first query after the UTC calendar date
changes.  The rate-limit cooldown is a timestamp comparison, so no
background timer is ever needed.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable

import structlog

from reelpicks.shared.providers.types import BackendDescriptor, UsageSnapshot

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


@dataclass
class _MinuteEvent:
    timestamp: float
    count: int = 1


@dataclass
class UsageRecord:
    """Mutable counters for one backend. Only the ledger touches these."""

    last_daily_reset: float
    daily_count: int = 0
    minute_events: deque[_MinuteEvent] = field(default_factory=deque)
    exhausted_at: float | None = None
    permanently_disabled: bool = False
    in_flight: int = 0
    warning_emitted: bool = False

    @property
    def minute_count(self) -> int:
        return sum(e.count for e in self.minute_events)


def _utc_date(timestamp: float) -> date:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()


class UsageLedger:
    """Process-local usage bookkeeping for every backend in the catalog.

    One re-entrant lock guards the whole ledger; the selector takes it
    around check-then-reserve so concurrent requests cannot jointly
    overshoot a budget.
    """

    def __init__(
        self,
        *,
        clock: Clock = time.time,
        window_seconds: float = 60.0,
        cooldown_seconds: float = 60.0,
        warning_threshold: float = 0.90,
    ) -> None:
        self._clock = clock
        self._window = window_seconds
        self._cooldown = cooldown_seconds
        self._warning_thr = warning_threshold

        self._records: dict[str, UsageRecord] = {}
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    # ── Eligibility ──────────────────────────────────────────
    def is_eligible(self, backend: BackendDescriptor, now: float | None = None) -> bool:
        """Recompute eligibility from scratch for ``backend`` at ``now``."""
        now = self._now(now)
        with self._lock:
            record = self._refresh(backend.name, now)
            return self._eligible(backend, record)

    def reserve(self, backend: BackendDescriptor, now: float | None = None) -> bool:
        """Take an in-flight slot if the backend is eligible.

        The slot counts against both budgets until an outcome is
        recorded or ``release`` is called.
        """
        now = self._now(now)
        with self._lock:
            record = self._refresh(backend.name, now)
            if not self._eligible(backend, record):
                return False
            record.in_flight += 1
            return True

    def release(self, name: str) -> None:
        """Return a reserved slot without recording usage."""
        with self._lock:
            record = self._records.get(name)
            if record is not None and record.in_flight > 0:
                record.in_flight -= 1

    # ── Recording ────────────────────────────────────────────
    def record_success(
        self,
        name: str,
        now: float | None = None,
        *,
        daily_budget: int | None = None,
    ) -> None:
        """Count a successful call against both windows."""
        now = self._now(now)
        with self._lock:
            record = self._refresh(name, now)
            if record.in_flight > 0:
                record.in_flight -= 1
            record.daily_count += 1
            record.minute_events.append(_MinuteEvent(now))
            logger.info(
                "ledger_usage_recorded",
                backend=name,
                daily=record.daily_count,
                minute=record.minute_count,
            )
            if daily_budget:
                self._check_warning(name, record, daily_budget)

    def record_rate_limited(self, name: str, now: float | None = None) -> None:
        """Start the cooldown for ``name``."""
        now = self._now(now)
        with self._lock:
            record = self._refresh(name, now)
            if record.in_flight > 0:
                record.in_flight -= 1
            record.exhausted_at = now
            logger.warning(
                "ledger_backend_rate_limited",
                backend=name,
                cooldown_s=self._cooldown,
            )

    def record_permanently_unavailable(self, name: str, now: float | None = None) -> None:
        """Disable ``name`` for the rest of the process lifetime."""
        now = self._now(now)
        with self._lock:
            record = self._refresh(name, now)
            if record.in_flight > 0:
                record.in_flight -= 1
            record.permanently_disabled = True
            logger.warning("ledger_backend_disabled", backend=name)

    # ── Observation ──────────────────────────────────────────
    def snapshot(self, backend: BackendDescriptor, now: float | None = None) -> UsageSnapshot:
        now = self._now(now)
        with self._lock:
            record = self._refresh(backend.name, now)
            remaining = 0.0
            if record.exhausted_at is not None:
                remaining = max(0.0, record.exhausted_at + self._cooldown - now)
            return UsageSnapshot(
                backend=backend.name,
                daily_count=record.daily_count,
                daily_budget=backend.daily_budget,
                minute_count=record.minute_count,
                minute_budget=backend.minute_budget,
                in_flight=record.in_flight,
                exhausted=record.exhausted_at is not None,
                cooldown_remaining_s=round(remaining, 1),
                permanently_disabled=record.permanently_disabled,
                eligible=self._eligible(backend, record),
            )

    # ── Internals ────────────────────────────────────────────
    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now

    def _refresh(self, name: str, now: float) -> UsageRecord:
        """Create lazily, roll the day, evict old events. Caller holds lock."""
        record = self._records.get(name)
        if record is None:
            record = UsageRecord(last_daily_reset=now)
            self._records[name] = record
            return record

        if _utc_date(record.last_daily_reset) != _utc_date(now):
            record.daily_count = 0
            record.exhausted_at = None
            record.warning_emitted = False
            record.last_daily_reset = now
            logger.info("ledger_daily_reset", backend=name)

        cutoff = now - self._window
        while record.minute_events and record.minute_events[0].timestamp <= cutoff:
            record.minute_events.popleft()

        if record.exhausted_at is not None and now >= record.exhausted_at + self._cooldown:
            record.exhausted_at = None
            logger.info("ledger_cooldown_expired", backend=name)

        return record

    def _eligible(self, backend: BackendDescriptor, record: UsageRecord) -> bool:
        """Caller holds lock and has refreshed ``record``."""
        if record.permanently_disabled:
            return False
        if record.exhausted_at is not None:
            return False
        if record.daily_count + record.in_flight >= backend.daily_budget:
            return False
        return record.minute_count + record.in_flight < backend.minute_budget

    def _check_warning(self, name: str, record: UsageRecord, daily_budget: int) -> None:
        """Emit early warning when approaching the daily limit. Caller holds lock."""
        if record.warning_emitted:
            return
        usage_pct = record.daily_count / daily_budget
        if usage_pct >= self._warning_thr:
            record.warning_emitted = True
            logger.warning(
                "ledger_daily_budget_warning",
                backend=name,
                usage_pct=float(f"{(usage_pct * 100):.1f}"),
                daily_used=record.daily_count,
                daily_budget=daily_budget,
            )
