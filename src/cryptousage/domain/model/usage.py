"""Usage facts attached to content hashes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FactKind(StrEnum):
    ALGORITHMS = "algorithms"
    LIBRARIES = "libraries"


@dataclass(frozen=True, slots=True)
class AlgorithmUsage:
    """A cryptographic primitive found in the content behind a hash."""

    content_hash: str
    algorithm: str
    strength: str

    @property
    def identity(self) -> tuple[str, str]:
        return (self.algorithm.lower(), self.strength)


@dataclass(frozen=True, slots=True)
class LibraryDetection:
    """A known cryptographic library detected in the content behind a hash."""

    content_hash: str
    detection_id: str
    name: str
    description: str = ""
    url: str = ""
    category: str = ""
    purl: str = ""

    @property
    def identity(self) -> str:
        return self.detection_id


type UsageFact = AlgorithmUsage | LibraryDetection
