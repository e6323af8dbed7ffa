"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import CatalogStore
from .metrics import BatchMetrics, NullBatchMetrics
from .unit_of_work import QueryRepositories, QueryUnitOfWork
from .usage import AlgorithmUsageStore, LibraryUsageStore, UsageStore

__all__ = [
    "AlgorithmUsageStore",
    "BatchMetrics",
    "CatalogStore",
    "LibraryUsageStore",
    "NullBatchMetrics",
    "QueryRepositories",
    "QueryUnitOfWork",
    "UsageStore",
]
