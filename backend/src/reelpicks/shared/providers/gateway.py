"""Dispatch orchestrator — the main entry-point for backend calls.

Composes BackendSelector, UsageLedger and the per-family adapters into a
bounded failover loop.  Callers hand in the prompts and get back the raw
text of the first backend that answered, or a typed failure.

State machine for one request::

    SELECTING → CALLING → SUCCEEDED
                        → RECOVERABLE_FAILURE → SELECTING
    SELECTING (nothing eligible / ceiling reached) → EXHAUSTED
    CALLING (transport error) → hard failure, no further attempts
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Mapping, Sequence

import structlog

from reelpicks.domain.enums import AttemptOutcome, ProviderFamily
from reelpicks.domain.exceptions import AllModelsExhaustedError, NetworkError
from reelpicks.shared.observability.metrics import (
    DISPATCH_ATTEMPTS,
    DISPATCH_FAILURES,
    DISPATCH_LATENCY,
)
from reelpicks.shared.providers.ledger import UsageLedger
from reelpicks.shared.providers.router import BackendSelector
from reelpicks.shared.providers.types import (
    AdapterResult,
    BackendDescriptor,
    DispatchAttempt,
    DispatchResult,
    UsageSnapshot,
)

if TYPE_CHECKING:
    from reelpicks.ports.outbound import BackendAdapter

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_RETRY_AFTER_S = 60


class DispatchOrchestrator:
    """Provider-agnostic failover loop across a priority-ordered catalog.

    Usage::

        orchestrator = DispatchOrchestrator(catalog, ledger, adapters)
        result = await orchestrator.dispatch(system_prompt, user_prompt)
        result.text  # raw body from the backend that succeeded

    The ledger is injected so a single instance can be shared by every
    request in the process.
    """

    def __init__(
        self,
        catalog: Sequence[BackendDescriptor],
        ledger: UsageLedger,
        adapters: Mapping[ProviderFamily, BackendAdapter],
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_after_seconds: int = DEFAULT_RETRY_AFTER_S,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._ledger = ledger
        self._adapters = dict(adapters)
        self._max_attempts = max_attempts
        self._retry_after = retry_after_seconds
        self._selector = BackendSelector(
            catalog,
            ledger,
            configured_families=[f for f, a in self._adapters.items() if a.is_configured],
        )

    @property
    def selector(self) -> BackendSelector:
        return self._selector

    @property
    def has_usable_backends(self) -> bool:
        return bool(self._selector.usable_catalog)

    # ── Main entry-point ─────────────────────────────────────
    async def dispatch(self, system_prompt: str, user_prompt: str) -> DispatchResult:
        """Run the failover loop until a backend answers.

        Raises:
            AllModelsExhaustedError: Nothing eligible, or every attempt
                within the ceiling failed recoverably.
            NetworkError: A backend call broke at the transport level.
        """
        attempts: list[DispatchAttempt] = []
        errors: dict[str, str] = {}

        while len(attempts) < self._max_attempts:
            backend = self._selector.acquire()
            if backend is None:
                break

            try:
                attempt = await self._call(backend, system_prompt, user_prompt)
            except BaseException:
                # caller gave up mid-call; hand the slot back uncharged
                self._ledger.release(backend.name)
                logger.warning("dispatch_abandoned", backend=backend.name, attempt=len(attempts) + 1)
                raise
            attempts.append(attempt)
            log = logger.bind(
                backend=backend.name,
                attempt=len(attempts),
                outcome=attempt.outcome.value,
            )
            log.info("dispatch_attempt", latency_ms=attempt.latency_ms)

            if attempt.outcome == AttemptOutcome.SUCCESS:
                self._ledger.record_success(backend.name, daily_budget=backend.daily_budget)
                if len(attempts) > 1:
                    log.info(
                        "dispatch_failover_success",
                        failed_backends=[a.backend for a in attempts[:-1]],
                    )
                return DispatchResult(backend=backend.name, text=attempt.text or "", attempts=attempts)

            if not attempt.outcome.is_recoverable:
                self._ledger.release(backend.name)
                DISPATCH_FAILURES.labels(kind="network_error").inc()
                log.error("dispatch_transport_error", error=attempt.error)
                raise NetworkError(backend=backend.name)

            if attempt.outcome == AttemptOutcome.NOT_FOUND:
                self._ledger.record_permanently_unavailable(backend.name)
            else:
                # rate limited or empty body: cool down and move on
                self._ledger.record_rate_limited(backend.name)

            errors[backend.name] = attempt.error or attempt.outcome.value

        DISPATCH_FAILURES.labels(kind="all_models_exhausted").inc()
        logger.error(
            "dispatch_exhausted",
            attempts=len(attempts),
            max_attempts=self._max_attempts,
            errors=errors,
        )
        message = (
            "All AI models failed to respond"
            if attempts
            else "All AI models are currently rate limited. Please try again later."
        )
        raise AllModelsExhaustedError(
            message,
            retry_after_seconds=self._retry_after,
            errors=errors,
        )

    # ── Single invocation ────────────────────────────────────
    async def _call(
        self,
        backend: BackendDescriptor,
        system_prompt: str,
        user_prompt: str,
    ) -> DispatchAttempt:
        adapter = self._adapters[backend.family]
        start = time.monotonic()
        try:
            result = await adapter.invoke(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                model=backend.name,
            )
        except Exception as exc:
            logger.exception("adapter_raised", backend=backend.name)
            result = AdapterResult(
                AttemptOutcome.TRANSPORT_ERROR,
                error=f"{type(exc).__name__}: {exc}",
            )
        latency = time.monotonic() - start

        if result.outcome == AttemptOutcome.SUCCESS and not result.text.strip():
            result = AdapterResult(AttemptOutcome.EMPTY_RESPONSE)

        DISPATCH_ATTEMPTS.labels(backend=backend.name, outcome=result.outcome.value).inc()
        DISPATCH_LATENCY.labels(backend=backend.name).observe(latency)

        return DispatchAttempt(
            backend=backend.name,
            outcome=result.outcome,
            text=result.text if result.outcome == AttemptOutcome.SUCCESS else None,
            error=result.error,
            latency_ms=float(f"{latency * 1000:.1f}"),
        )

    # ── Usage observation ────────────────────────────────────
    def get_usage(self) -> list[UsageSnapshot]:
        return [self._ledger.snapshot(b) for b in self._selector.catalog]
