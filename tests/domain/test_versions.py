from __future__ import annotations

import pytest
from semver import Version

from cryptousage.domain.requirements import compile_constraint
from cryptousage.domain.versions import (
    MIN_VERSION,
    canonical,
    coerce_version,
    group_by_version,
    record_version,
    rows_for_version,
    select_all_in_range,
    select_best,
)
from tests.helpers.catalog import make_record


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("1.2.3", Version(1, 2, 3)),
        ("v1.2", Version(1, 2, 0)),
        ("7", Version(7, 0, 0)),
        ("1.2.3-beta.1", Version(1, 2, 3, prerelease="beta.1")),
        ("1.2.3+build.7", Version(1, 2, 3, build="build.7")),
    ],
)
def test_coerce_version(label: str, expected: Version) -> None:
    assert coerce_version(label) == expected


@pytest.mark.parametrize("label", [None, "", "nightly", "1.2.3.4", "release-1"])
def test_coerce_version_rejects_non_versions(label: str | None) -> None:
    assert coerce_version(label) is None


def test_canonical_drops_build_metadata() -> None:
    assert canonical(Version(1, 2, 3, build="sha.abc")) == "1.2.3"
    assert canonical(Version(1, 2, 3, prerelease="rc.1")) == "1.2.3-rc.1"


def test_record_version_prefers_semver_label() -> None:
    record = make_record("release-5.4.7", semver="5.4.7")
    fallback = make_record("v2.0", semver="")

    assert record_version(record) == Version(5, 4, 7)
    assert record_version(fallback) == Version(2, 0, 0)


def test_select_best_returns_highest_version() -> None:
    records = [make_record("1.0.0"), make_record("2.0.0"), make_record("1.5.0")]

    best = select_best(records)

    assert best is records[1]


def test_select_best_applies_constraint() -> None:
    records = [make_record("1.0.0"), make_record("2.0.0"), make_record("1.5.0")]

    best = select_best(records, compile_constraint("<2.0.0"))

    assert best is records[2]


def test_select_best_first_row_wins_per_version() -> None:
    first = make_record("v1.0.0", "first")
    second = make_record("1.0.0", "second")

    assert select_best([first, second]) is first
    assert select_best([second, first]) is second


def test_select_best_none_when_nothing_satisfies() -> None:
    records = [make_record("1.0.0"), make_record("1.1.0")]

    assert select_best(records, compile_constraint(">=2.0.0")) is None
    assert select_best([]) is None


def test_unparsable_versions_never_beat_real_ones() -> None:
    nightly = make_record("nightly")
    real = make_record("0.1.0")

    assert select_best([nightly, real]) is real
    assert select_best([nightly]) is nightly
    assert record_version(nightly) is None
    assert group_by_version([nightly])[0].version == MIN_VERSION


def test_rows_without_any_version_are_skipped() -> None:
    unversioned = make_record(None, "nohash", semver="")

    assert group_by_version([unversioned]) == []


def test_select_all_in_range_groups_rows_by_value() -> None:
    records = [
        make_record("v1.2.0", "a"),
        make_record("1.0.0", "b"),
        make_record("1.2.0", "c"),
        make_record("2.0.0", "d"),
    ]

    groups = select_all_in_range(records, compile_constraint("<2.0.0"))

    assert [group.key for group in groups] == ["1.0.0", "1.2.0"]
    assert groups[1].label == "v1.2.0"
    assert groups[1].content_hashes == ("a", "c")


def test_selection_is_deterministic() -> None:
    records = [make_record(version) for version in ("3.0.0", "1.0.0", "2.0.0", "2.0.0+b")]

    assert select_all_in_range(records) == select_all_in_range(records)
    assert select_best(records) is select_best(records)


def test_rows_for_version_collects_siblings() -> None:
    selected = make_record("5.4.7", "h1")
    sibling = make_record("v5.4.7", "h2")
    other = make_record("5.4.6", "h3")

    rows = rows_for_version([other, sibling, selected], selected)

    assert rows == (selected, sibling)


def test_rows_for_version_ignores_rows_without_labels() -> None:
    selected = make_record("nightly", "h1", semver="")
    unlabelled = make_record("", "h2", semver="")
    also_unparsable = make_record("latest", "h3", semver="")

    rows = rows_for_version([unlabelled, also_unparsable, selected], selected)

    assert rows == (selected, also_unparsable)
