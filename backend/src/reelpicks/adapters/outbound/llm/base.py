"""Shared HTTP plumbing for provider adapters."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

import httpx
import structlog

from reelpicks.domain.enums import AttemptOutcome
from reelpicks.ports.outbound import BackendAdapter
from reelpicks.shared.providers.types import AdapterResult

logger = structlog.get_logger(__name__)

_STATUS_OUTCOMES: dict[int, AttemptOutcome] = {
    429: AttemptOutcome.RATE_LIMITED,
    404: AttemptOutcome.NOT_FOUND,
}


def classify_status(status_code: int) -> AttemptOutcome:
    """Map a non-2xx provider status onto the dispatch outcome vocabulary."""
    return _STATUS_OUTCOMES.get(status_code, AttemptOutcome.TRANSPORT_ERROR)


class HttpBackendAdapter(BackendAdapter):
    """Adapter backed by a single ``httpx.AsyncClient``.

    Subclasses build the request and extract the text; this class owns
    the call, the timeout and the error classification.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key.strip()
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def invoke(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        model: str,
    ) -> AdapterResult:
        log = logger.bind(family=self.family.value, model=model)
        if not self.is_configured:
            # Selector filters these out; reaching here means the catalog was bypassed.
            return AdapterResult(AttemptOutcome.TRANSPORT_ERROR, error="missing api key")

        try:
            response = await self._send(system_prompt, user_prompt, model)
        except httpx.TimeoutException as exc:
            log.warning("provider_timeout", error=str(exc))
            return AdapterResult(AttemptOutcome.TRANSPORT_ERROR, error=f"Timeout: {exc}")
        except httpx.HTTPError as exc:
            log.warning("provider_request_failed", error=f"{type(exc).__name__}: {exc}")
            return AdapterResult(
                AttemptOutcome.TRANSPORT_ERROR,
                error=f"{type(exc).__name__}: {exc}",
            )

        if response.is_error:
            outcome = classify_status(response.status_code)
            log.warning(
                "provider_error_status",
                status=response.status_code,
                outcome=outcome.value,
                body=response.text[:500],
            )
            return AdapterResult(
                outcome,
                error=f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            log.warning("provider_invalid_body", body=response.text[:500])
            return AdapterResult(
                AttemptOutcome.TRANSPORT_ERROR,
                error="Provider returned a non-JSON body",
                status_code=response.status_code,
            )

        embedded = self._embedded_error(data)
        if embedded is not None:
            return embedded

        return AdapterResult.success(self._extract_text(data))

    async def close(self) -> None:
        await self._client.aclose()

    # ── Provider specifics ───────────────────────────────────
    @abstractmethod
    async def _send(self, system_prompt: str, user_prompt: str, model: str) -> httpx.Response:
        """POST the provider-specific request body."""

    @abstractmethod
    def _extract_text(self, data: Any) -> str:
        """Pull the generated text out of a decoded 2xx body; "" when absent."""

    def _embedded_error(self, data: Any) -> AdapterResult | None:
        """Some providers report failures inside a 200 body."""
        return None
