"""Ports for reading the component-version catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cryptousage.domain.model import CatalogRecord


@runtime_checkable
class CatalogStore(Protocol):
    """Read contract for catalog rows keyed by bare name and ecosystem."""

    def find_by_name_type(self, name: str, ecosystem: str) -> Sequence[CatalogRecord]:
        """All rows for a component, newest first."""
        ...

    def find_by_name_type_version(
        self, name: str, ecosystem: str, version: str
    ) -> Sequence[CatalogRecord]:
        """Fully indexed rows with data for one exact version label."""
        ...

    def find_by_name_type_with_data(self, name: str, ecosystem: str) -> Sequence[CatalogRecord]:
        """All rows for a component except the ones flagged as having no data."""
        ...
