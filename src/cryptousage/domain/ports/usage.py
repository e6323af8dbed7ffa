"""Ports for reading usage facts keyed by content hash."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cryptousage.domain.model import AlgorithmUsage, LibraryDetection


@runtime_checkable
class UsageStore[TFact](Protocol):
    """Single batched read of facts for a set of hashes."""

    def find_by_hashes(self, hashes: Sequence[str]) -> Sequence[TFact]: ...


@runtime_checkable
class AlgorithmUsageStore(UsageStore["AlgorithmUsage"], Protocol):
    """Cryptographic algorithm usage per content hash."""


@runtime_checkable
class LibraryUsageStore(UsageStore["LibraryDetection"], Protocol):
    """Known cryptographic library detections per content hash."""
