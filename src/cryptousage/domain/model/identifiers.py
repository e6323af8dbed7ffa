"""Parsed package identifiers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Identifier:
    """A package URL broken down into the parts used as catalog keys.

    ``name`` is the bare catalog name (``namespace/name`` when a namespace is
    present). ``version`` and ``requirement`` are never both exact: an exact-version
    requirement is promoted into ``version`` at parse time and ``promoted`` is set.
    """

    raw: str
    ecosystem: str
    name: str
    version: str | None = None
    requirement: str | None = None
    promoted: bool = False

    @property
    def has_version(self) -> bool:
        return bool(self.version)


@dataclass(frozen=True, slots=True)
class ComponentRequest:
    """One requested package URL with its optional version requirement."""

    purl: str
    requirement: str | None = None
