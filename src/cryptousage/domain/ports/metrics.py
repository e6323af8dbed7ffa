"""Port for recording batch-level measurements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cryptousage.domain.model import FactKind, SelectionMode, Summary


@runtime_checkable
class BatchMetrics(Protocol):
    def record_batch(
        self,
        *,
        mode: SelectionMode,
        kind: FactKind,
        elapsed_seconds: float,
        summary: Summary,
    ) -> None: ...


class NullBatchMetrics:
    """Recorder that discards every measurement."""

    def record_batch(
        self,
        *,
        mode: SelectionMode,
        kind: FactKind,
        elapsed_seconds: float,
        summary: Summary,
    ) -> None:
        _ = (mode, kind, elapsed_seconds, summary)
