"""Domain model for catalog usage queries."""

from __future__ import annotations

from .catalog import NO_DATA_HASH, CatalogRecord, RangeMatch, is_no_data_hash
from .identifiers import ComponentRequest, Identifier
from .outcomes import (
    BatchResult,
    Outcome,
    OutputItem,
    SelectionMode,
    Summary,
    SummaryBuilder,
    WithoutSemver,
)
from .usage import AlgorithmUsage, FactKind, LibraryDetection, UsageFact

__all__ = [
    "NO_DATA_HASH",
    "AlgorithmUsage",
    "BatchResult",
    "CatalogRecord",
    "ComponentRequest",
    "FactKind",
    "Identifier",
    "LibraryDetection",
    "Outcome",
    "OutputItem",
    "RangeMatch",
    "SelectionMode",
    "Summary",
    "SummaryBuilder",
    "UsageFact",
    "WithoutSemver",
    "is_no_data_hash",
]
