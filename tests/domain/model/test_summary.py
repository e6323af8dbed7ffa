from __future__ import annotations

from cryptousage.domain.model import (
    AlgorithmUsage,
    Outcome,
    OutputItem,
    Summary,
    SummaryBuilder,
    WithoutSemver,
)


def _item(identifier: str, outcome: Outcome, requirement: str | None = None) -> OutputItem:
    return OutputItem(identifier=identifier, outcome=outcome, requirement=requirement)


def test_each_outcome_lands_in_one_bucket() -> None:
    builder = SummaryBuilder(total=6)

    builder.record(_item("pkg:npm/a", Outcome.FOUND))
    builder.record(_item("pkg:npm/b", Outcome.PARSE_FAILURE))
    builder.record(_item("bad", Outcome.PARSE_FAILURE, requirement=">=1.0.0"))
    builder.record(_item("pkg:npm/c", Outcome.NOT_FOUND))
    builder.record(_item("pkg:npm/d", Outcome.NO_INFO))
    builder.record(_item("pkg:npm/e", Outcome.NOT_FOUND), skipped_versions=("nightly",))
    summary = builder.build()

    assert summary.failed_to_parse == ("pkg:npm/b", "purl: bad , requirement: >=1.0.0")
    assert summary.not_found == ("pkg:npm/c",)
    assert summary.without_info == ("pkg:npm/d",)
    assert summary.without_semver == (WithoutSemver("pkg:npm/e", ("nightly",)),)
    assert summary.unsuccessful == 5
    assert summary.found == 1


def test_empty_summary_counts_everything_found() -> None:
    summary = Summary(total=3)

    assert summary.unsuccessful == 0
    assert summary.found == 3


def test_output_item_versions_without_facts() -> None:
    item = OutputItem(
        identifier="pkg:npm/a",
        outcome=Outcome.FOUND,
        versions=("1.0.0", "1.1.0", "2.0.0"),
        versions_with_facts=("1.1.0",),
        facts=(AlgorithmUsage("h", "aes", "128"),),
    )

    assert item.version == "2.0.0"
    assert item.versions_without_facts == ("1.0.0", "2.0.0")


def test_output_item_without_versions() -> None:
    item = _item("pkg:npm/a", Outcome.NOT_FOUND)

    assert item.version is None
    assert item.versions_without_facts == ()
