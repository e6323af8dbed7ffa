"""Package URL parsing into catalog identifiers."""

from __future__ import annotations

import logging
import re

from packageurl import PackageURL

from .errors import ParseError
from .model import Identifier

log = logging.getLogger(__name__)

LOCAL_REQUIREMENT_PREFIX = "file:"

_EXACT_REQUIREMENT = re.compile(
    r"^(?:==?\s*)?(?P<version>v?\d+(?:\.\d+){2}(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)$"
)


def parse_purl(raw: str) -> PackageURL:
    """Parse a package URL, raising ``ParseError`` on malformed or incomplete input."""

    candidate = raw.strip() if raw else ""
    if not candidate:
        raise ParseError("empty package identifier", raw=raw)
    try:
        purl = PackageURL.from_string(candidate)
    except ValueError as exc:
        raise ParseError(f"invalid package identifier {raw!r}: {exc}", raw=raw) from exc
    if not purl.type or not purl.name:
        raise ParseError(f"package identifier {raw!r} lacks a type or name", raw=raw)
    return purl


def bare_name(purl: PackageURL) -> str:
    """Return the catalog key for a purl: ``namespace/name`` without version."""

    if purl.namespace:
        return f"{purl.namespace}/{purl.name}"
    return purl.name


def version_from_requirement(requirement: str) -> str | None:
    """Return the pinned version if a requirement names exactly one version.

    The version is kept as written, ``v`` prefix included; only a leading ``=``
    or ``==`` is removed.
    """

    match = _EXACT_REQUIREMENT.match(requirement.strip())
    if match is None:
        return None
    return match.group("version")


def parse_identifier(raw: str, requirement: str | None = None) -> Identifier:
    """Turn a raw identifier plus optional requirement into an ``Identifier``.

    Local (``file:``) requirements are dropped. When the purl has no version and the
    requirement pins an exact one, the requirement is promoted to the version so the
    catalog can be queried for it directly. A promoted version is flagged so a miss on
    the literal label can still be matched by version value.
    """

    purl = parse_purl(raw)
    version = purl.version or None
    cleaned = requirement.strip() if requirement else None

    if cleaned and cleaned.startswith(LOCAL_REQUIREMENT_PREFIX):
        log.debug("Removing 'local' requirement for purl: %s (req: %s)", raw, cleaned)
        cleaned = None

    promoted = False
    if version is None and cleaned:
        pinned = version_from_requirement(cleaned)
        if pinned is not None:
            version = pinned
            cleaned = None
            promoted = True

    return Identifier(
        raw=raw,
        ecosystem=purl.type,
        name=bare_name(purl),
        version=version,
        requirement=cleaned or None,
        promoted=promoted,
    )
