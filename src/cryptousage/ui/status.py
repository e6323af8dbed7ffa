"""Overall response status derived from a batch summary."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cryptousage.domain.model import Summary

log = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Success"


class StatusCode(StrEnum):
    SUCCESS = "SUCCESS"
    SUCCEEDED_WITH_WARNINGS = "SUCCEEDED_WITH_WARNINGS"
    FAILED = "FAILED"


class HttpCode(IntEnum):
    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500


class ResponseCardinality(StrEnum):
    """Whether the caller asked about one component or a batch of them."""

    SINGLE = "single"
    MANY = "many"


@dataclass(frozen=True, slots=True)
class ResponseStatus:
    status: StatusCode
    http_code: HttpCode
    message: str = SUCCESS_MESSAGE

    @property
    def failed(self) -> bool:
        return self.status is StatusCode.FAILED


def error_messages(summary: Summary) -> list[str]:
    """One message per non-empty summary bucket, non-semver components listed individually."""

    messages: list[str] = []
    if summary.failed_to_parse:
        messages.append(
            f"Failed to parse {len(summary.failed_to_parse)} purl(s):"
            + ",".join(summary.failed_to_parse)
        )
    if summary.not_found:
        messages.append(
            f"Can't find {len(summary.not_found)} purl(s):" + ",".join(summary.not_found)
        )
    if summary.without_info:
        messages.append(
            f"Can't find information for {len(summary.without_info)} purl(s):"
            + ",".join(summary.without_info)
        )
    messages.extend(
        f"Versions found for {entry.identifier} are not semver compliant. "
        f"Version found: '{entry.versions[0] if entry.versions else ''}'"
        for entry in summary.without_semver
    )
    return messages


def derive_status(
    summary: Summary,
    *,
    cardinality: ResponseCardinality = ResponseCardinality.MANY,
) -> ResponseStatus:
    """Map a summary to an overall status, an HTTP-equivalent code and a message."""

    messages = error_messages(summary)
    message = " | ".join(messages) if messages else SUCCESS_MESSAGE
    log.debug(
        "Purl summary - total: %d, successful: %d, failed to parse: %d, not found: %d, "
        "no info: %d, no semver: %d",
        summary.total,
        summary.found,
        len(summary.failed_to_parse),
        len(summary.not_found),
        len(summary.without_info),
        len(summary.without_semver),
    )

    if cardinality is ResponseCardinality.SINGLE:
        status, code = _single_status(summary)
    else:
        status, code = _batch_status(summary)
    return ResponseStatus(status=status, http_code=code, message=message)


def _batch_status(summary: Summary) -> tuple[StatusCode, HttpCode]:
    if summary.unsuccessful == 0:
        return StatusCode.SUCCESS, HttpCode.OK
    if summary.found <= 0:
        if summary.failed_to_parse and len(summary.failed_to_parse) >= summary.total:
            return StatusCode.FAILED, HttpCode.BAD_REQUEST
        return StatusCode.FAILED, HttpCode.NOT_FOUND
    return StatusCode.SUCCEEDED_WITH_WARNINGS, HttpCode.OK


def _single_status(summary: Summary) -> tuple[StatusCode, HttpCode]:
    if summary.failed_to_parse:
        return StatusCode.FAILED, HttpCode.BAD_REQUEST
    if summary.not_found or summary.without_semver:
        return StatusCode.FAILED, HttpCode.NOT_FOUND
    if summary.without_info:
        return StatusCode.SUCCEEDED_WITH_WARNINGS, HttpCode.OK
    return StatusCode.SUCCESS, HttpCode.OK
