from __future__ import annotations

import pytest

from cryptousage.domain.model import Summary, WithoutSemver
from cryptousage.ui.status import (
    HttpCode,
    ResponseCardinality,
    StatusCode,
    derive_status,
    error_messages,
)

JS = "pkg:github/scanoss/scanoss.js"
GO = "pkg:golang/github.com/scanoss/papi"


def test_all_found_is_success() -> None:
    status = derive_status(Summary(total=2))

    assert status.status is StatusCode.SUCCESS
    assert status.http_code is HttpCode.OK
    assert status.message == "Success"
    assert not status.failed


def test_partial_success_has_warnings() -> None:
    summary = Summary(total=3, not_found=(GO,), without_info=(JS,))

    status = derive_status(summary)

    assert status.status is StatusCode.SUCCEEDED_WITH_WARNINGS
    assert status.http_code is HttpCode.OK
    assert status.message == (
        f"Can't find 1 purl(s):{GO} | Can't find information for 1 purl(s):{JS}"
    )


def test_only_parse_failures_is_bad_request() -> None:
    summary = Summary(
        total=2,
        failed_to_parse=("pkg:githubscanoss", "purl: nonsense , requirement: >=1.0.0"),
    )

    status = derive_status(summary)

    assert status.status is StatusCode.FAILED
    assert status.http_code is HttpCode.BAD_REQUEST
    assert status.message == (
        "Failed to parse 2 purl(s):pkg:githubscanoss,purl: nonsense , requirement: >=1.0.0"
    )
    assert status.failed


def test_nothing_found_is_not_found() -> None:
    summary = Summary(total=2, failed_to_parse=("nonsense",), not_found=(GO,))

    status = derive_status(summary)

    assert status.status is StatusCode.FAILED
    assert status.http_code is HttpCode.NOT_FOUND


def test_without_semver_counts_as_unsuccessful() -> None:
    summary = Summary(total=1, without_semver=(WithoutSemver(JS, ("nightly", "latest")),))

    status = derive_status(summary)

    assert status.status is StatusCode.FAILED
    assert status.http_code is HttpCode.NOT_FOUND
    assert status.message == (
        f"Versions found for {JS} are not semver compliant. Version found: 'nightly'"
    )


def test_error_messages_follow_bucket_order() -> None:
    summary = Summary(
        total=5,
        failed_to_parse=("bad",),
        not_found=(GO,),
        without_info=(JS,),
        without_semver=(WithoutSemver("pkg:npm/odd", ("nightly",)),),
    )

    messages = error_messages(summary)

    assert [message.split(" ", 1)[0] for message in messages] == [
        "Failed",
        "Can't",
        "Can't",
        "Versions",
    ]
    assert error_messages(Summary(total=1)) == []


@pytest.mark.parametrize(
    ("summary", "expected"),
    [
        (Summary(total=1), (StatusCode.SUCCESS, HttpCode.OK)),
        (Summary(total=1, failed_to_parse=("bad",)), (StatusCode.FAILED, HttpCode.BAD_REQUEST)),
        (Summary(total=1, not_found=(JS,)), (StatusCode.FAILED, HttpCode.NOT_FOUND)),
        (
            Summary(total=1, without_semver=(WithoutSemver(JS, ("nightly",)),)),
            (StatusCode.FAILED, HttpCode.NOT_FOUND),
        ),
        (
            Summary(total=1, without_info=(JS,)),
            (StatusCode.SUCCEEDED_WITH_WARNINGS, HttpCode.OK),
        ),
    ],
)
def test_single_component_status(summary: Summary, expected: tuple[StatusCode, HttpCode]) -> None:
    status = derive_status(summary, cardinality=ResponseCardinality.SINGLE)

    assert (status.status, status.http_code) == expected


def test_single_no_info_differs_from_batch() -> None:
    summary = Summary(total=1, without_info=(JS,))

    assert derive_status(summary).status is StatusCode.FAILED
    assert (
        derive_status(summary, cardinality=ResponseCardinality.SINGLE).status
        is StatusCode.SUCCEEDED_WITH_WARNINGS
    )
