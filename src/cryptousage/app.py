"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from cryptousage.adapters.sqlalchemy.migrations import upgrade_head
from cryptousage.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyQueryUnitOfWork,
    configured_engine,
    is_started,
    startup,
)
from cryptousage.config import get_database_uri, get_query_config
from cryptousage.domain.aggregation import Aggregator, BatchOptions
from cryptousage.domain.ports import QueryUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cryptousage.config import QueryConfig
    from cryptousage.domain.cancellation import CancellationToken
    from cryptousage.domain.model import BatchResult, ComponentRequest
    from cryptousage.domain.ports import BatchMetrics

UnitOfWorkFactory = Callable[[], QueryUnitOfWork]


log = getLogger(__name__)


def batch_options(config: QueryConfig) -> BatchOptions:
    return BatchOptions(
        workers=config.workers,
        max_hashes_per_query=config.max_hashes_per_query,
        strict_requirements=config.strict_requirements,
        timeout_seconds=config.timeout_seconds,
    )


def build_aggregator(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    query_config: QueryConfig | None = None,
    metrics: BatchMetrics | None = None,
) -> Aggregator:
    """Wire an ``Aggregator`` to the configured catalog database."""

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyQueryUnitOfWork
    config = query_config or get_query_config()
    log.debug(
        "Building aggregator: workers=%s, max_hashes=%s, strict=%s, timeout=%s",
        config.workers,
        config.max_hashes_per_query,
        config.strict_requirements,
        config.timeout_seconds,
    )
    return Aggregator(unit_of_work_factory, options=batch_options(config), metrics=metrics)


def get_components_algorithms(
    requests: Sequence[ComponentRequest],
    *,
    aggregator: Aggregator | None = None,
    cancellation: CancellationToken | None = None,
) -> BatchResult:
    """Algorithms of the best matching version for each component."""

    return (aggregator or build_aggregator()).algorithms(requests, cancellation=cancellation)


def get_algorithms_in_range(
    requests: Sequence[ComponentRequest],
    *,
    aggregator: Aggregator | None = None,
    cancellation: CancellationToken | None = None,
) -> BatchResult:
    """Algorithms merged across every version inside each component's requirement."""

    return (aggregator or build_aggregator()).algorithms_in_range(
        requests, cancellation=cancellation
    )


def get_libraries_in_range(
    requests: Sequence[ComponentRequest],
    *,
    aggregator: Aggregator | None = None,
    cancellation: CancellationToken | None = None,
) -> BatchResult:
    """Cryptographic library detections across every version in range."""

    return (aggregator or build_aggregator()).libraries_in_range(
        requests, cancellation=cancellation
    )


def upgrade_database(*, database_uri: str | None = None) -> str:
    """Create or upgrade a local catalog schema; returns the database URI used.

    Without an explicit URI, a started adapter has its own engine upgraded.
    """

    engine = configured_engine() if database_uri is None else None
    if engine is not None:
        uri = engine.url.render_as_string(hide_password=True)
        log.info("Upgrading catalog schema at %s", uri)
        upgrade_head(engine=engine)
        return uri

    uri = database_uri or get_database_uri()
    log.info("Upgrading catalog schema at %s", uri)
    upgrade_head(database_uri=uri)
    return uri
