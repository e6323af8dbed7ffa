"""Unit-of-work abstraction grouping the read-only stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from .catalog import CatalogStore
    from .usage import AlgorithmUsageStore, LibraryUsageStore


@dataclass(slots=True)
class QueryRepositories:
    """Stores consulted while answering one batch."""

    catalog: CatalogStore
    algorithms: AlgorithmUsageStore
    libraries: LibraryUsageStore


@runtime_checkable
class QueryUnitOfWork(Protocol):
    """Read-only session boundary around ``QueryRepositories``."""

    @property
    def repositories(self) -> QueryRepositories: ...

    def __enter__(self) -> QueryUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...
