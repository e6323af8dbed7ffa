"""Catalog rows as read from the component-version store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

NO_DATA_HASH: Final[str] = "404"


def is_no_data_hash(content_hash: str | None) -> bool:
    """Return whether a content hash carries no usable usage data."""

    return not content_hash or content_hash == NO_DATA_HASH


@dataclass(frozen=True, slots=True)
class CatalogRecord:
    """One provenance row for a component version."""

    content_hash: str
    component_name: str
    version_label: str | None
    semver_label: str | None
    ecosystem: str
    provenance_id: int | None = None


@dataclass(frozen=True, slots=True)
class RangeMatch:
    """Rows of a range query plus the version labels that could not be parsed."""

    records: tuple[CatalogRecord, ...] = ()
    skipped_versions: tuple[str, ...] = ()
    parsed: int = 0

    @property
    def all_unparsable(self) -> bool:
        return bool(self.skipped_versions) and self.parsed == 0
