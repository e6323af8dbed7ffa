"""Read-only repositories over the catalog and usage tables."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from cryptousage.adapters.sqlalchemy.mappings import (
    all_urls_table,
    component_crypto_library_table,
    component_crypto_table,
    crypto_libraries_table,
    mines_table,
    versions_table,
)
from cryptousage.domain.errors import StorageError
from cryptousage.domain.model import NO_DATA_HASH, AlgorithmUsage, CatalogRecord, LibraryDetection

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from sqlalchemy import Row, Select
    from sqlalchemy.orm import Session

log = logging.getLogger(__name__)


@contextmanager
def _storage_errors(description: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        log.error("Failed to query %s: %s", description, exc)
        raise StorageError(f"failed to query {description}: {exc}") from exc


class SqlAlchemyCatalogRepository:
    """Catalog rows joined with their version and provenance."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_name_type(self, name: str, ecosystem: str) -> list[CatalogRecord]:
        stmt = self._select(name, ecosystem)
        return self._fetch(stmt, ecosystem, f"all urls for {ecosystem}/{name}")

    def find_by_name_type_version(
        self, name: str, ecosystem: str, version: str
    ) -> list[CatalogRecord]:
        stmt = (
            self._select(name, ecosystem)
            .where(versions_table.c.version_name == version)
            .where(all_urls_table.c.is_mined.is_(True))
            .where(all_urls_table.c.package_hash.not_in(("", NO_DATA_HASH)))
        )
        return self._fetch(stmt, ecosystem, f"all urls for {ecosystem}/{name}@{version}")

    def find_by_name_type_with_data(self, name: str, ecosystem: str) -> list[CatalogRecord]:
        stmt = self._select(name, ecosystem).where(all_urls_table.c.package_hash != NO_DATA_HASH)
        return self._fetch(stmt, ecosystem, f"all urls with data for {ecosystem}/{name}")

    @staticmethod
    def _select(name: str, ecosystem: str) -> Select[tuple[str, str, str, str, str, int]]:
        return (
            select(
                all_urls_table.c.package_hash,
                all_urls_table.c.component,
                versions_table.c.version_name,
                versions_table.c.semver,
                mines_table.c.purl_type,
                all_urls_table.c.mine_id,
            )
            .select_from(all_urls_table)
            .outerjoin(mines_table, all_urls_table.c.mine_id == mines_table.c.id)
            .outerjoin(versions_table, all_urls_table.c.version_id == versions_table.c.id)
            .where(mines_table.c.purl_type == ecosystem)
            .where(all_urls_table.c.purl_name == name)
            .order_by(all_urls_table.c.date.desc())
        )

    def _fetch(
        self,
        stmt: Select[tuple[str, str, str, str, str, int]],
        ecosystem: str,
        description: str,
    ) -> list[CatalogRecord]:
        with _storage_errors(description):
            rows = self.session.execute(stmt).all()
        return [_record_from_row(row, ecosystem) for row in rows]


def _record_from_row(
    row: Row[tuple[str, str, str, str, str, int]], ecosystem: str
) -> CatalogRecord:
    content_hash, component, version_name, semver_label, purl_type, mine_id = row
    return CatalogRecord(
        content_hash=content_hash or "",
        component_name=component,
        version_label=version_name,
        semver_label=semver_label,
        ecosystem=purl_type or ecosystem,
        provenance_id=mine_id,
    )


class SqlAlchemyAlgorithmUsageRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_hashes(self, hashes: Sequence[str]) -> list[AlgorithmUsage]:
        stmt = select(
            component_crypto_table.c.url_hash,
            component_crypto_table.c.algorithm_name,
            component_crypto_table.c.strength,
        ).where(component_crypto_table.c.url_hash.in_(hashes))
        with _storage_errors("crypto usage"):
            rows = self.session.execute(stmt).all()
        return [
            AlgorithmUsage(content_hash=url_hash, algorithm=algorithm, strength=strength or "")
            for url_hash, algorithm, strength in rows
        ]


class SqlAlchemyLibraryUsageRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_hashes(self, hashes: Sequence[str]) -> list[LibraryDetection]:
        libraries = crypto_libraries_table
        detections = component_crypto_library_table
        stmt = (
            select(
                detections.c.url_hash,
                libraries.c.id,
                libraries.c.name,
                libraries.c.description,
                libraries.c.url,
                libraries.c.category,
                libraries.c.purl,
            )
            .join(libraries, detections.c.det_id == libraries.c.id)
            .where(detections.c.url_hash.in_(hashes))
        )
        with _storage_errors("library detections"):
            rows = self.session.execute(stmt).all()
        return [
            LibraryDetection(
                content_hash=row.url_hash,
                detection_id=row.id,
                name=row.name,
                description=row.description or "",
                url=row.url or "",
                category=row.category or "",
                purl=row.purl or "",
            )
            for row in rows
        ]
