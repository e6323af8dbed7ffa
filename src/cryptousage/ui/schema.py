"""Pydantic models for the JSON request and response documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from cryptousage.domain.model import (
    AlgorithmUsage,
    ComponentRequest,
    LibraryDetection,
    Outcome,
)

from .status import HttpCode, ResponseStatus, StatusCode  # noqa: TC001

if TYPE_CHECKING:
    from cryptousage.domain.model import BatchResult, OutputItem


class CryptoBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# Requests --------------------------------------------------------------------


class PurlRequestItem(CryptoBaseModel):
    purl: str = Field(min_length=1)
    requirement: str | None = None


class PurlBatchRequest(CryptoBaseModel):
    purls: list[PurlRequestItem] = Field(min_length=1)

    def to_requests(self) -> list[ComponentRequest]:
        return [
            ComponentRequest(purl=item.purl, requirement=item.requirement) for item in self.purls
        ]


# Responses -------------------------------------------------------------------


class StatusPayload(CryptoBaseModel):
    status: StatusCode
    message: str
    http_code: HttpCode

    @classmethod
    def from_status(cls, status: ResponseStatus) -> StatusPayload:
        return cls(status=status.status, message=status.message, http_code=status.http_code)


class AlgorithmPayload(CryptoBaseModel):
    algorithm: str
    strength: str


class DetectionPayload(CryptoBaseModel):
    id: str
    name: str
    description: str = ""
    url: str | None = None
    category: str = ""
    purl: str | None = None


class ComponentAlgorithms(CryptoBaseModel):
    purl: str
    version: str = ""
    requirement: str | None = None
    algorithms: list[AlgorithmPayload] = Field(default_factory=list["AlgorithmPayload"])


class ComponentAlgorithmsInRange(CryptoBaseModel):
    purl: str
    versions: list[str] = Field(default_factory=list)
    algorithms: list[AlgorithmPayload] = Field(default_factory=list["AlgorithmPayload"])


class ComponentLibrariesInRange(CryptoBaseModel):
    purl: str
    versions: list[str] = Field(default_factory=list)
    hints: list[DetectionPayload] = Field(default_factory=list["DetectionPayload"])


class ComponentVersionsInRange(CryptoBaseModel):
    purl: str
    versions_with: list[str] = Field(default_factory=list)
    versions_without: list[str] = Field(default_factory=list)


class AlgorithmsResponse(CryptoBaseModel):
    purls: list[ComponentAlgorithms] = Field(default_factory=list["ComponentAlgorithms"])
    status: StatusPayload


class AlgorithmsInRangeResponse(CryptoBaseModel):
    purls: list[ComponentAlgorithmsInRange] = Field(
        default_factory=list["ComponentAlgorithmsInRange"]
    )
    status: StatusPayload


class LibrariesInRangeResponse(CryptoBaseModel):
    purls: list[ComponentLibrariesInRange] = Field(
        default_factory=list["ComponentLibrariesInRange"]
    )
    status: StatusPayload


class VersionsInRangeResponse(CryptoBaseModel):
    purls: list[ComponentVersionsInRange] = Field(
        default_factory=list["ComponentVersionsInRange"]
    )
    status: StatusPayload


# Builders --------------------------------------------------------------------


def _algorithms(item: OutputItem) -> list[AlgorithmPayload]:
    return [
        AlgorithmPayload(algorithm=fact.algorithm, strength=fact.strength)
        for fact in item.facts
        if isinstance(fact, AlgorithmUsage)
    ]


def _detections(item: OutputItem) -> list[DetectionPayload]:
    return [
        DetectionPayload(
            id=fact.detection_id,
            name=fact.name,
            description=fact.description,
            url=fact.url or None,
            category=fact.category,
            purl=fact.purl or None,
        )
        for fact in item.facts
        if isinstance(fact, LibraryDetection)
    ]


def component_algorithms(item: OutputItem) -> ComponentAlgorithms:
    return ComponentAlgorithms(
        purl=item.identifier,
        version=item.version or "",
        requirement=item.requirement,
        algorithms=_algorithms(item),
    )


def component_algorithms_in_range(item: OutputItem) -> ComponentAlgorithmsInRange:
    return ComponentAlgorithmsInRange(
        purl=item.identifier, versions=list(item.versions), algorithms=_algorithms(item)
    )


def component_libraries_in_range(item: OutputItem) -> ComponentLibrariesInRange:
    return ComponentLibrariesInRange(
        purl=item.identifier, versions=list(item.versions), hints=_detections(item)
    )


def component_versions_in_range(item: OutputItem) -> ComponentVersionsInRange:
    """Split the selected versions by whether any algorithm was found for them."""

    if item.outcome is Outcome.PARSE_FAILURE:
        return ComponentVersionsInRange(purl=item.identifier)
    return ComponentVersionsInRange(
        purl=item.identifier,
        versions_with=list(item.versions_with_facts),
        versions_without=list(item.versions_without_facts),
    )


def algorithms_response(result: BatchResult, status: ResponseStatus) -> AlgorithmsResponse:
    return AlgorithmsResponse(
        purls=[component_algorithms(item) for item in result.items],
        status=StatusPayload.from_status(status),
    )


def algorithms_in_range_response(
    result: BatchResult, status: ResponseStatus
) -> AlgorithmsInRangeResponse:
    return AlgorithmsInRangeResponse(
        purls=[component_algorithms_in_range(item) for item in result.items],
        status=StatusPayload.from_status(status),
    )


def libraries_in_range_response(
    result: BatchResult, status: ResponseStatus
) -> LibrariesInRangeResponse:
    return LibrariesInRangeResponse(
        purls=[component_libraries_in_range(item) for item in result.items],
        status=StatusPayload.from_status(status),
    )


def versions_in_range_response(
    result: BatchResult, status: ResponseStatus
) -> VersionsInRangeResponse:
    return VersionsInRangeResponse(
        purls=[component_versions_in_range(item) for item in result.items],
        status=StatusPayload.from_status(status),
    )
