"""SQLAlchemy-backed read-only unit of work for catalog queries."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from cryptousage.adapters.sqlalchemy.migrations import upgrade_head
from cryptousage.adapters.sqlalchemy.repositories import (
    SqlAlchemyAlgorithmUsageRepository,
    SqlAlchemyCatalogRepository,
    SqlAlchemyLibraryUsageRepository,
)
from cryptousage.config import get_database_config
from cryptousage.domain.ports import QueryRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call cryptousage.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    migrate: bool = False,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine and session factory.

    ``migrate`` upgrades the schema to the latest revision first; production catalogs
    are owned elsewhere and are only read.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        database = get_database_config()
        engine = create_engine(database_uri or database.uri, echo=database.echo)
    if migrate:
        upgrade_head(engine=engine)

    if _STATE.engine is not None and _STATE.engine is not engine:
        _STATE.engine.dispose()
    _STATE.engine = engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories](ABC):
    """Session lifecycle shared by the SQLAlchemy units of work."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        # reads only; nothing is ever committed
        self.rollback()
        self.session.close()
        self.session = None
        return False

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyQueryUnitOfWork(BaseSqlAlchemyUnitOfWork[QueryRepositories]):
    """Unit of work handing out the catalog and usage repositories."""

    def _build_repositories(self, session: Session) -> QueryRepositories:
        return QueryRepositories(
            catalog=SqlAlchemyCatalogRepository(session),
            algorithms=SqlAlchemyAlgorithmUsageRepository(session),
            libraries=SqlAlchemyLibraryUsageRepository(session),
        )


if TYPE_CHECKING:
    from cryptousage.domain.ports import QueryUnitOfWork

    _uow_check: QueryUnitOfWork = SqlAlchemyQueryUnitOfWork()
