"""SQLAlchemy table metadata for the component catalog and usage facts."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    false,
    orm,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Catalog ---------------------------------------------------------------------

mines_table = Table(
    "mines",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, nullable=True),
    Column("purl_type", String, nullable=False),
)

versions_table = Table(
    "versions",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("version_name", String, nullable=False),
    Column("semver", String, nullable=True),
)

all_urls_table = Table(
    "all_urls",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("package_hash", String, nullable=False, default=""),
    Column("component", String, nullable=False),
    Column("purl_name", String, nullable=False),
    Column("version_id", Integer, ForeignKey("versions.id"), nullable=True),
    Column("mine_id", Integer, ForeignKey("mines.id"), nullable=True),
    Column("date", UTCDateTime(), nullable=True),
    Column("is_mined", Boolean, nullable=False, server_default=false()),
    Index("ix_all_urls_purl_name", "purl_name"),
    Index("ix_all_urls_package_hash", "package_hash"),
)

# Usage facts -----------------------------------------------------------------

component_crypto_table = Table(
    "component_crypto",
    mapper_registry.metadata,
    Column("url_hash", String, primary_key=True),
    Column("algorithm_name", String, primary_key=True),
    Column("strength", String, primary_key=True, default=""),
)

crypto_libraries_table = Table(
    "crypto_libraries",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("description", String, nullable=False, default=""),
    Column("url", String, nullable=False, default=""),
    Column("category", String, nullable=False, default=""),
    Column("purl", String, nullable=False, default=""),
)

component_crypto_library_table = Table(
    "component_crypto_library",
    mapper_registry.metadata,
    Column("url_hash", String, primary_key=True),
    Column("det_id", String, ForeignKey("crypto_libraries.id"), primary_key=True),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the catalog metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
