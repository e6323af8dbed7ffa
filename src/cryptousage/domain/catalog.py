"""Catalog resolution: the three query shapes over a ``CatalogStore``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .cancellation import NEVER_CANCELLED, CancellationToken
from .errors import InputError
from .model import RangeMatch
from .versions import record_version

if TYPE_CHECKING:
    from .model import CatalogRecord
    from .ports import CatalogStore
    from .requirements import Constraint

log = logging.getLogger(__name__)


class CatalogResolver:
    """Validates query input and applies client-side range filtering."""

    def __init__(
        self,
        store: CatalogStore,
        *,
        cancellation: CancellationToken = NEVER_CANCELLED,
    ) -> None:
        self._store = store
        self._cancellation = cancellation

    def exact(self, name: str, ecosystem: str, version: str) -> list[CatalogRecord]:
        _require(name=name, ecosystem=ecosystem, version=version)
        self._cancellation.raise_if_cancelled()
        records = list(self._store.find_by_name_type_version(name, ecosystem, version))
        log.debug("Found %d results for %s, %s@%s", len(records), ecosystem, name, version)
        return records

    def loose(self, name: str, ecosystem: str) -> list[CatalogRecord]:
        _require(name=name, ecosystem=ecosystem)
        self._cancellation.raise_if_cancelled()
        records = list(self._store.find_by_name_type(name, ecosystem))
        log.debug("Found %d results for %s, %s", len(records), ecosystem, name)
        return records

    def in_range(self, name: str, ecosystem: str, constraint: Constraint | None) -> RangeMatch:
        """Return rows whose parsed version satisfies ``constraint``.

        Rows without a parseable version are left out of the result and their labels
        reported in ``skipped_versions``.
        """

        _require(name=name, ecosystem=ecosystem, requirement=str(constraint or ""))
        self._cancellation.raise_if_cancelled()
        fetched = self._store.find_by_name_type_with_data(name, ecosystem)

        matched: list[CatalogRecord] = []
        skipped: list[str] = []
        parsed = 0
        for record in fetched:
            version = record_version(record)
            if version is None:
                skipped.append(record.semver_label or record.version_label or "")
                continue
            parsed += 1
            if constraint is not None and constraint.check(version):
                matched.append(record)
        log.debug(
            "Found %d results for %s, %s (%d in range %s)",
            len(fetched),
            ecosystem,
            name,
            len(matched),
            constraint,
        )
        return RangeMatch(records=tuple(matched), skipped_versions=tuple(skipped), parsed=parsed)


def _require(**fields: str) -> None:
    missing = sorted(name for name, value in fields.items() if not value or not value.strip())
    if missing:
        raise InputError(f"please specify a valid {', '.join(missing)} to query")
