"""Version requirement validation and constraint compilation.

Requirements follow the range grammar common to package managers:

- ``||`` separates alternatives, ``,`` or whitespace separates comparators that
  must all hold;
- comparators are ``=``, ``==``, ``!=``, ``>``, ``>=``, ``<``, ``<=``, ``~``,
  ``~>``, ``^`` or a bare version;
- versions may carry a ``v`` prefix, may be partial (``1.2``) and may use ``x``,
  ``X`` or ``*`` wildcards; ``1.2 - 1.4.5`` is an inclusive hyphen range.

Partial versions are zero-filled for ``>``, ``>=`` and ``<`` (``>v5.3`` is
``>5.3.0``) and cover their whole range for ``=``, ``<=``, ``~`` and ``^``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from semver import Version

from .errors import ConstraintError

WILDCARD: Final[str] = "*"
COMPARATOR_CHARS: Final[str] = "><=~^"

_PARTIAL_VERSION = re.compile(
    r"^v?(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)
_COMPARATOR = re.compile(r"\s*(?P<op>!=|==|>=|=>|<=|=<|~>|[=<>~^])?\s*(?P<version>[^\s,<>=!~^|]+)")
_SEPARATOR = re.compile(r"[\s,]*")
_HYPHEN = re.compile(r"^\s*(?P<low>[^\s,]+)\s+-\s+(?P<high>[^\s,]+)\s*$")
_WILDCARDS = frozenset({"x", "X", "*"})

type VersionPredicate = Callable[[Version], bool]


def is_wildcard_requirement(requirement: str) -> bool:
    """Return whether a requirement is a bare wildcard (``*`` or ``v*...``)."""

    stripped = requirement.strip()
    return stripped == WILDCARD or stripped.startswith("v*")


def validate_requirement(requirement: str) -> bool:
    """Return whether every comma-separated segment holds a strict semantic version.

    Comparator characters and a leading ``v`` are stripped from each segment before
    the remainder is parsed as ``major.minor.patch[-pre][+build]``.
    """

    for raw_segment in requirement.split(","):
        segment = raw_segment.strip()
        if not segment:
            return False
        version = segment.lstrip(COMPARATOR_CHARS).strip().lstrip("v")
        try:
            Version.parse(version)
        except (TypeError, ValueError):
            return False
    return True


@dataclass(frozen=True, slots=True)
class _Partial:
    major: int | None
    minor: int | None
    patch: int | None
    prerelease: str | None

    @property
    def is_complete(self) -> bool:
        return self.patch is not None

    def floor(self) -> Version:
        return Version(
            self.major or 0,
            self.minor or 0,
            self.patch or 0,
            prerelease=self.prerelease if self.is_complete else None,
        )

    def ceiling(self) -> Version:
        """Smallest version above everything this partial version covers."""

        if self.major is None:
            raise ConstraintError("a full wildcard has no upper bound")
        if self.minor is None:
            return Version(self.major + 1, 0, 0)
        return Version(self.major, self.minor + 1, 0)


@dataclass(frozen=True, slots=True)
class _Comparator:
    text: str
    predicate: VersionPredicate
    has_prerelease: bool


@dataclass(frozen=True, slots=True)
class _Group:
    comparators: tuple[_Comparator, ...]

    def check(self, version: Version) -> bool:
        if version.prerelease and not any(c.has_prerelease for c in self.comparators):
            return False
        return all(comparator.predicate(version) for comparator in self.comparators)


@dataclass(frozen=True, slots=True)
class Constraint:
    """A compiled requirement; ``check`` tells whether a version satisfies it."""

    requirement: str
    groups: tuple[_Group, ...]

    def check(self, version: Version) -> bool:
        return any(group.check(version) for group in self.groups)

    def __str__(self) -> str:
        return self.requirement


def compile_constraint(requirement: str) -> Constraint:
    """Compile a requirement string, raising ``ConstraintError`` when it is malformed."""

    if not requirement or not requirement.strip():
        raise ConstraintError("empty version requirement", raw=requirement)
    groups = tuple(
        _parse_group(alternative, requirement) for alternative in requirement.split("||")
    )
    return Constraint(requirement=requirement.strip(), groups=groups)


def _parse_group(text: str, requirement: str) -> _Group:
    if not text.strip():
        raise ConstraintError(f"empty alternative in requirement {requirement!r}", raw=requirement)

    hyphen = _HYPHEN.match(text)
    if hyphen is not None:
        low = _parse_partial(hyphen.group("low"), requirement)
        high = _parse_partial(hyphen.group("high"), requirement)
        return _Group(
            comparators=(
                _comparator(">=", low, hyphen.group("low")),
                _comparator("<=", high, hyphen.group("high")),
            )
        )

    comparators: list[_Comparator] = []
    position = 0
    while True:
        separator = _SEPARATOR.match(text, position)
        if separator is not None:
            position = separator.end()
        if position >= len(text):
            break
        match = _COMPARATOR.match(text, position)
        if match is None:
            raise ConstraintError(
                f"unexpected input {text[position:]!r} in requirement {requirement!r}",
                raw=requirement,
            )
        op = match.group("op") or "="
        version_text = match.group("version")
        comparators.append(_comparator(op, _parse_partial(version_text, requirement), version_text))
        position = match.end()

    if not comparators:
        raise ConstraintError(f"no comparators in requirement {requirement!r}", raw=requirement)
    return _Group(comparators=tuple(comparators))


def _parse_partial(text: str, requirement: str) -> _Partial:
    match = _PARTIAL_VERSION.match(text)
    if match is None:
        raise ConstraintError(
            f"invalid version {text!r} in requirement {requirement!r}", raw=requirement
        )
    parts: list[int | None] = []
    wildcard_seen = False
    for name in ("major", "minor", "patch"):
        value = match.group(name)
        if value is None or value in _WILDCARDS:
            wildcard_seen = True
            parts.append(None)
            continue
        if wildcard_seen:
            raise ConstraintError(
                f"version {text!r} has a number after a wildcard", raw=requirement
            )
        parts.append(int(value))
    major, minor, patch = parts
    prerelease = match.group("prerelease")
    if prerelease and patch is None:
        raise ConstraintError(
            f"pre-release tag on incomplete version {text!r}", raw=requirement
        )
    return _Partial(major=major, minor=minor, patch=patch, prerelease=prerelease)


def _comparator(op: str, partial: _Partial, text: str) -> _Comparator:
    return _Comparator(
        text=f"{op}{text}",
        predicate=_predicate(op, partial),
        has_prerelease=bool(partial.prerelease),
    )


def _predicate(op: str, partial: _Partial) -> VersionPredicate:  # noqa: PLR0911, C901
    if partial.major is None:
        # "*" style comparators either match everything or nothing
        matches_all = op in {"=", "==", ">=", "=>", "<=", "=<", "~", "~>", "^"}
        return lambda _version: matches_all

    floor = partial.floor()
    if op in {">", ">=", "=>", "<"}:
        match op:
            case ">":
                return lambda version: version > floor
            case "<":
                return lambda version: version < floor
            case _:
                return lambda version: version >= floor

    if op in {"~", "~>"}:
        if partial.minor is None:
            ceiling = Version(floor.major + 1, 0, 0)
        else:
            ceiling = Version(floor.major, floor.minor + 1, 0)
        return lambda version: floor <= version < ceiling

    if op == "^":
        ceiling = _caret_ceiling(partial)
        return lambda version: floor <= version < ceiling

    if partial.is_complete:
        match op:
            case "=" | "==":
                return lambda version: version.compare(floor) == 0
            case "!=":
                return lambda version: version.compare(floor) != 0
            case _:
                return lambda version: version <= floor

    ceiling = partial.ceiling()
    match op:
        case "=" | "==":
            return lambda version: floor <= version < ceiling
        case "!=":
            return lambda version: version < floor or version >= ceiling
        case _:
            return lambda version: version < ceiling


def _caret_ceiling(partial: _Partial) -> Version:
    major = partial.major or 0
    if major > 0 or partial.minor is None:
        return Version(major + 1, 0, 0)
    minor = partial.minor
    if minor > 0 or partial.patch is None:
        return Version(0, minor + 1, 0)
    return Version(0, 0, (partial.patch or 0) + 1)
