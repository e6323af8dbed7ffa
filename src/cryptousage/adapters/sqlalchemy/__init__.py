"""SQLAlchemy adapter package for the catalog and usage stores."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry
from .repositories import (
    SqlAlchemyAlgorithmUsageRepository,
    SqlAlchemyCatalogRepository,
    SqlAlchemyLibraryUsageRepository,
)
from .unit_of_work import (
    SqlAlchemyQueryUnitOfWork,
    StartupError,
    configured_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAlgorithmUsageRepository",
    "SqlAlchemyCatalogRepository",
    "SqlAlchemyLibraryUsageRepository",
    "SqlAlchemyQueryUnitOfWork",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "startup",
]
