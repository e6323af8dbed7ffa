"""Per-identifier outcomes and the batch summary."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from .usage import UsageFact  # noqa: TC001


class Outcome(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    NO_INFO = "no_info"
    PARSE_FAILURE = "parse_failure"


class SelectionMode(StrEnum):
    """How versions are picked for an identifier."""

    BEST = "best"
    RANGE = "range"


@dataclass(frozen=True, slots=True)
class OutputItem:
    """Result for one requested identifier."""

    identifier: str
    outcome: Outcome
    requirement: str | None = None
    versions: tuple[str, ...] = ()
    versions_with_facts: tuple[str, ...] = ()
    facts: tuple[UsageFact, ...] = ()

    @property
    def version(self) -> str | None:
        """Highest selected version, if any."""

        return self.versions[-1] if self.versions else None

    @property
    def versions_without_facts(self) -> tuple[str, ...]:
        with_facts = set(self.versions_with_facts)
        return tuple(version for version in self.versions if version not in with_facts)


@dataclass(frozen=True, slots=True)
class WithoutSemver:
    """Identifier whose catalog versions could not be read as semantic versions."""

    identifier: str
    versions: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Summary:
    total: int = 0
    failed_to_parse: tuple[str, ...] = ()
    not_found: tuple[str, ...] = ()
    without_info: tuple[str, ...] = ()
    without_semver: tuple[WithoutSemver, ...] = ()

    @property
    def unsuccessful(self) -> int:
        return (
            len(self.failed_to_parse)
            + len(self.not_found)
            + len(self.without_info)
            + len(self.without_semver)
        )

    @property
    def found(self) -> int:
        return self.total - self.unsuccessful


@dataclass(slots=True)
class SummaryBuilder:
    """Accumulates one bucket entry per identifier outcome."""

    total: int = 0
    failed_to_parse: list[str] = field(default_factory=list[str])
    not_found: list[str] = field(default_factory=list[str])
    without_info: list[str] = field(default_factory=list[str])
    without_semver: list[WithoutSemver] = field(default_factory=list[WithoutSemver])

    def record(self, item: OutputItem, *, skipped_versions: tuple[str, ...] = ()) -> None:
        match item.outcome:
            case Outcome.PARSE_FAILURE:
                self.failed_to_parse.append(_describe(item))
            case Outcome.NOT_FOUND if skipped_versions:
                self.without_semver.append(
                    WithoutSemver(identifier=item.identifier, versions=skipped_versions)
                )
            case Outcome.NOT_FOUND:
                self.not_found.append(item.identifier)
            case Outcome.NO_INFO:
                self.without_info.append(item.identifier)
            case Outcome.FOUND:
                pass

    def build(self) -> Summary:
        return Summary(
            total=self.total,
            failed_to_parse=tuple(self.failed_to_parse),
            not_found=tuple(self.not_found),
            without_info=tuple(self.without_info),
            without_semver=tuple(self.without_semver),
        )


@dataclass(frozen=True, slots=True)
class BatchResult:
    items: tuple[OutputItem, ...]
    summary: Summary


def _describe(item: OutputItem) -> str:
    if item.requirement:
        return f"purl: {item.identifier} , requirement: {item.requirement}"
    return item.identifier
