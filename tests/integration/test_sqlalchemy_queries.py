from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from cryptousage.adapters.sqlalchemy.migrations import upgrade_head
from cryptousage.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyQueryUnitOfWork,
    shutdown,
    startup,
)
from cryptousage.domain.aggregation import Aggregator, BatchOptions
from cryptousage.domain.model import (
    AlgorithmUsage,
    ComponentRequest,
    LibraryDetection,
    Outcome,
    WithoutSemver,
)
from cryptousage.ui.status import StatusCode, derive_status
from tests.helpers.catalog import seed_scanoss_catalog

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from cryptousage.domain.model import OutputItem

JS = "pkg:github/scanoss/scanoss.js"


@pytest.fixture
def aggregator(
    sqlite_unit_of_work: Callable[[], SqlAlchemyQueryUnitOfWork],
    seeded_session: Session,
) -> Aggregator:
    _ = seeded_session
    return Aggregator(sqlite_unit_of_work)


def _algorithms(item: OutputItem) -> set[tuple[str, str]]:
    return {(f.algorithm, f.strength) for f in item.facts if isinstance(f, AlgorithmUsage)}


def test_best_version_skips_rows_without_data(aggregator: Aggregator) -> None:
    result = aggregator.algorithms([ComponentRequest(JS), ComponentRequest(JS, "<5.5.0")])

    latest, pinned = result.items
    assert latest.version == "6.0.0"
    assert latest.outcome is Outcome.NO_INFO
    assert pinned.version == "5.4.7"
    assert _algorithms(pinned) == {("rsa", "2048"), ("ecdsa", "256")}


def test_algorithms_in_range(aggregator: Aggregator) -> None:
    result = aggregator.algorithms_in_range(
        [ComponentRequest(JS, ">v5.3"), ComponentRequest(JS, ">=5.4.5,<5.4.7")]
    )

    wide, narrow = result.items
    assert wide.versions == ("5.3.1", "5.4.5", "5.4.6", "5.4.7", "5.5.0")
    assert _algorithms(wide) == {
        ("aes", "128"),
        ("sha1", "160"),
        ("sha256", "256"),
        ("rsa", "2048"),
        ("ecdsa", "256"),
        ("md5", "128"),
    }
    assert narrow.versions == ("5.4.5", "5.4.6")
    assert _algorithms(narrow) == {("aes", "128"), ("sha256", "256")}
    assert derive_status(result.summary).status is StatusCode.SUCCESS


def test_exact_version_only_reads_mined_rows(aggregator: Aggregator) -> None:
    result = aggregator.algorithms_in_range(
        [ComponentRequest(f"{JS}@v5.4.7"), ComponentRequest(f"{JS}@v5.5.0")]
    )

    mined, unmined = result.items
    assert mined.versions == ("5.4.7",)
    assert _algorithms(mined) == {("rsa", "2048"), ("ecdsa", "256")}
    assert unmined.outcome is Outcome.NOT_FOUND
    assert result.summary.not_found == (f"{JS}@v5.5.0",)


@pytest.mark.parametrize("requirement", ["v5.4.7", "5.4.7", "=5.4.7", "==v5.4.7"])
def test_exact_requirement_matches_v_prefixed_labels(
    aggregator: Aggregator, requirement: str
) -> None:
    best = aggregator.algorithms([ComponentRequest(JS, requirement)])
    in_range = aggregator.algorithms_in_range([ComponentRequest(JS, requirement)])

    for item in (*best.items, *in_range.items):
        assert item.outcome is Outcome.FOUND
        assert item.versions == ("5.4.7",)
        assert _algorithms(item) == {("rsa", "2048"), ("ecdsa", "256")}


def test_exact_requirement_outside_catalog_is_not_found(aggregator: Aggregator) -> None:
    best = aggregator.algorithms([ComponentRequest(JS, "9.9.9")])
    in_range = aggregator.algorithms_in_range([ComponentRequest(JS, "v9.9.9")])

    assert best.items[0].outcome is Outcome.NOT_FOUND
    assert in_range.items[0].outcome is Outcome.NOT_FOUND


def test_mixed_batch_summary(aggregator: Aggregator) -> None:
    result = aggregator.algorithms_in_range(
        [
            ComponentRequest(JS, ">=5.4.0"),
            ComponentRequest("pkg:github/scanoss/no-crypto", ">=1.0.0"),
            ComponentRequest("pkg:github/scanoss/odd-versions", ">=1.0.0"),
            ComponentRequest("pkg:github/scanoss/missing", ">=1.0.0"),
            ComponentRequest("pkg:githubscanoss", ">=1.0.0"),
        ]
    )

    summary = result.summary
    assert summary.without_info == ("pkg:github/scanoss/no-crypto",)
    assert summary.without_semver == (
        WithoutSemver("pkg:github/scanoss/odd-versions", ("nightly",)),
    )
    assert summary.not_found == ("pkg:github/scanoss/missing",)
    assert summary.failed_to_parse == ("purl: pkg:githubscanoss , requirement: >=1.0.0",)
    assert summary.found == 1
    assert derive_status(summary).status is StatusCode.SUCCEEDED_WITH_WARNINGS


def test_libraries_in_range(aggregator: Aggregator) -> None:
    result = aggregator.libraries_in_range([ComponentRequest(JS, ">=5.4.0,<6.0.0")])

    (item,) = result.items
    assert {f.detection_id for f in item.facts if isinstance(f, LibraryDetection)} == {
        "library/openssl",
        "library/libsodium",
    }
    assert item.versions_with_facts == ("5.4.5", "5.4.6")
    assert item.versions_without_facts == ("5.4.7", "5.5.0")


@pytest.fixture
def file_unit_of_work(tmp_path: Path) -> Iterator[Callable[[], SqlAlchemyQueryUnitOfWork]]:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}")
    upgrade_head(engine=engine)
    with Session(engine) as session:
        seed_scanoss_catalog(session)
    startup(engine=engine, force=True)
    try:
        yield SqlAlchemyQueryUnitOfWork
    finally:
        shutdown()


def test_concurrent_batch_matches_sequential(
    file_unit_of_work: Callable[[], SqlAlchemyQueryUnitOfWork],
) -> None:
    requests = [
        ComponentRequest(JS, ">v5.3"),
        ComponentRequest("pkg:github/scanoss/no-crypto", ">=1.0.0"),
        ComponentRequest(f"{JS}@v5.4.7"),
        ComponentRequest("pkg:github/scanoss/missing", ">=1.0.0"),
        ComponentRequest(JS, ">=5.4.5,<5.4.7"),
        ComponentRequest("pkg:github/scanoss/odd-versions", ">=1.0.0"),
    ]

    sequential = Aggregator(file_unit_of_work).algorithms_in_range(requests)
    concurrent = Aggregator(file_unit_of_work, options=BatchOptions(workers=4)).algorithms_in_range(
        requests
    )

    assert [item.identifier for item in concurrent.items] == [r.purl for r in requests]
    assert [item.versions for item in concurrent.items] == [
        item.versions for item in sequential.items
    ]
    assert [_algorithms(item) for item in concurrent.items] == [
        _algorithms(item) for item in sequential.items
    ]
    assert concurrent.summary == sequential.summary
