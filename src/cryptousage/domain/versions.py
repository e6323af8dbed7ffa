"""Version normalization and selection over catalog rows."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from semver import Version

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .model import CatalogRecord
    from .requirements import Constraint

log = logging.getLogger(__name__)

MIN_VERSION: Final[Version] = Version(0, 0, 0)

_LOOSE_VERSION = re.compile(
    r"^v?(?P<major>\d+)"
    r"(?:\.(?P<minor>\d+))?"
    r"(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


def coerce_version(label: str | None) -> Version | None:
    """Parse a catalog version label leniently; ``None`` when it is not a version.

    Accepts a ``v`` prefix, missing minor/patch parts and leading zeros.
    """

    if not label:
        return None
    match = _LOOSE_VERSION.match(label.strip())
    if match is None:
        return None
    return Version(
        int(match.group("major")),
        int(match.group("minor") or 0),
        int(match.group("patch") or 0),
        prerelease=match.group("prerelease"),
        build=match.group("build"),
    )


def canonical(version: Version) -> str:
    """Canonical string form used as the version identity (build metadata dropped)."""

    return str(version.replace(build=None))


def record_version(record: CatalogRecord) -> Version | None:
    """Parse a row's version: semantic label first, then display label."""

    return coerce_version(record.semver_label) or coerce_version(record.version_label)


@dataclass(frozen=True, slots=True)
class VersionGroup:
    """All catalog rows sharing one version value."""

    version: Version
    label: str
    records: tuple[CatalogRecord, ...]

    @property
    def key(self) -> str:
        return canonical(self.version)

    @property
    def content_hashes(self) -> tuple[str, ...]:
        return tuple(record.content_hash for record in self.records)


@dataclass(frozen=True, slots=True)
class _Candidate:
    version: Version
    label: str
    record: CatalogRecord


def _has_label(record: CatalogRecord) -> bool:
    return bool(record.version_label or record.semver_label)


def _candidates(
    records: Iterable[CatalogRecord],
    constraint: Constraint | None,
) -> list[_Candidate]:
    candidates: list[_Candidate] = []
    for record in records:
        if not _has_label(record):
            log.warning("Skipping match without a version: %s", record)
            continue
        version = record_version(record)
        if version is None:
            log.warning(
                "Encountered an issue parsing version string '%s' (%s) for %s. Using %s",
                record.version_label,
                record.semver_label,
                record.component_name,
                MIN_VERSION,
            )
            version = MIN_VERSION
            label = record.version_label or record.semver_label or str(MIN_VERSION)
        else:
            label = _parsed_label(record, version)
        if constraint is None or constraint.check(version):
            candidates.append(_Candidate(version=version, label=label, record=record))
    return candidates


def _parsed_label(record: CatalogRecord, version: Version) -> str:
    if coerce_version(record.semver_label) == version and record.semver_label:
        return record.semver_label
    return record.version_label or canonical(version)


def group_by_version(
    records: Iterable[CatalogRecord],
    constraint: Constraint | None = None,
) -> list[VersionGroup]:
    """Group rows satisfying ``constraint`` by version value, ascending."""

    grouped: dict[str, list[_Candidate]] = {}
    for candidate in _candidates(records, constraint):
        grouped.setdefault(canonical(candidate.version), []).append(candidate)
    groups = [
        VersionGroup(
            version=members[0].version,
            label=members[0].label,
            records=tuple(member.record for member in members),
        )
        for members in grouped.values()
    ]
    groups.sort(key=lambda group: group.version)
    return groups


def select_best(
    records: Sequence[CatalogRecord],
    constraint: Constraint | None = None,
) -> CatalogRecord | None:
    """Return the row of the highest version satisfying ``constraint``.

    Versions are deduplicated by value; the first row seen for a version wins.
    ``None`` means nothing satisfies the requirement.
    """

    groups = group_by_version(records, constraint)
    if not groups:
        log.warning("No component match found after filter %s", constraint)
        return None
    best = groups[-1]
    log.debug("Selected version %s out of %d candidates", best.label, len(groups))
    return best.records[0]


def select_all_in_range(
    records: Sequence[CatalogRecord],
    constraint: Constraint | None = None,
) -> list[VersionGroup]:
    """Return every distinct version satisfying ``constraint`` with all its rows."""

    return group_by_version(records, constraint)


def rows_for_version(
    records: Iterable[CatalogRecord],
    selected: CatalogRecord,
) -> tuple[CatalogRecord, ...]:
    """Return every row sharing the version of ``selected``, ``selected`` first.

    Rows carrying no version label at all are never siblings.
    """

    target = canonical(record_version(selected) or MIN_VERSION)
    siblings = [
        record
        for record in records
        if record is not selected
        and _has_label(record)
        and canonical(record_version(record) or MIN_VERSION) == target
    ]
    return (selected, *siblings)
