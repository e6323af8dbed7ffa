from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from cryptousage.adapters.sqlalchemy.migrations import upgrade_head
from cryptousage.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyQueryUnitOfWork,
    shutdown,
    startup,
)
from tests.helpers.catalog import FakeCatalog, seed_scanoss_catalog

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:")
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_session(sqlite_session: Session) -> Session:
    seed_scanoss_catalog(sqlite_session)
    return sqlite_session


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyQueryUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyQueryUnitOfWork:
        return SqlAlchemyQueryUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
