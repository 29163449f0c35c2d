"""Multi-backend routing framework.

Provides usage accounting, priority selection and bounded failover for
any set of interchangeable model backends.
"""

from reelpicks.shared.providers.types import (
    AdapterResult,
    BackendDescriptor,
    DEFAULT_CATALOG,
    DispatchAttempt,
    DispatchResult,
    UsageSnapshot,
)
from reelpicks.shared.providers.ledger import UsageLedger
from reelpicks.shared.providers.router import BackendSelector, select_backend
from reelpicks.shared.providers.gateway import DispatchOrchestrator

__all__ = [
    "AdapterResult",
    "BackendDescriptor",
    "BackendSelector",
    "DEFAULT_CATALOG",
    "DispatchAttempt",
    "DispatchOrchestrator",
    "DispatchResult",
    "UsageLedger",
    "UsageSnapshot",
    "select_backend",
]
