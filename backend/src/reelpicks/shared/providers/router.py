"""Backend router — picks the first eligible backend in catalog order.

Strict priority order is the tie-break: the most preferred backend is
used whenever it has *any* budget left.  No randomisation, no weighting.
"""

from __future__ import annotations

from typing import Collection, Sequence

import structlog

from reelpicks.domain.enums import ProviderFamily
from reelpicks.shared.providers.ledger import UsageLedger
from reelpicks.shared.providers.types import BackendDescriptor, validate_catalog

logger = structlog.get_logger(__name__)


def select_backend(
    catalog: Sequence[BackendDescriptor],
    ledger: UsageLedger,
    now: float | None = None,
) -> BackendDescriptor | None:
    """Return the first catalog entry the ledger considers eligible."""
    for backend in catalog:
        if ledger.is_eligible(backend, now):
            return backend
    return None


class BackendSelector:
    """Selects (and reserves) the next backend from a priority-ordered catalog."""

    def __init__(
        self,
        catalog: Sequence[BackendDescriptor],
        ledger: UsageLedger,
        *,
        configured_families: Collection[ProviderFamily] | None = None,
    ) -> None:
        validate_catalog(catalog)
        self._catalog = list(catalog)
        self._ledger = ledger
        self._families = (
            set(configured_families)
            if configured_families is not None
            else {b.family for b in self._catalog}
        )

        for backend in self._catalog:
            if backend.family not in self._families:
                logger.warning(
                    "backend_unconfigured",
                    backend=backend.name,
                    family=backend.family.value,
                )

    @property
    def catalog(self) -> list[BackendDescriptor]:
        return list(self._catalog)

    @property
    def usable_catalog(self) -> list[BackendDescriptor]:
        """Catalog entries whose family has a configured adapter."""
        return [b for b in self._catalog if b.family in self._families]

    def get(self, name: str) -> BackendDescriptor | None:
        return next((b for b in self._catalog if b.name == name), None)

    def select(self, now: float | None = None) -> BackendDescriptor | None:
        """Peek at the next backend without reserving it."""
        return select_backend(self.usable_catalog, self._ledger, now)

    def acquire(self, now: float | None = None) -> BackendDescriptor | None:
        """Select and reserve a slot in one critical section."""
        with self._ledger.lock:
            backend = select_backend(self.usable_catalog, self._ledger, now)
            if backend is None:
                logger.warning(
                    "no_available_backends",
                    total_configured=len(self._catalog),
                    usable=len(self.usable_catalog),
                )
                return None
            self._ledger.reserve(backend, now)

        logger.info("backend_selected", backend=backend.name, family=backend.family.value)
        return backend
