"""Usage lookup by content hash and fact deduplication."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from .cancellation import NEVER_CANCELLED, CancellationToken
from .errors import InputError
from .model import AlgorithmUsage, LibraryDetection, is_no_data_hash

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Sequence

    from .ports import UsageStore

log = logging.getLogger(__name__)


class UsageLookup[TFact: (AlgorithmUsage, LibraryDetection)]:
    """Batched facts-by-hash reads against one usage store."""

    def __init__(
        self,
        store: UsageStore[TFact],
        *,
        cancellation: CancellationToken = NEVER_CANCELLED,
    ) -> None:
        self._store = store
        self._cancellation = cancellation

    def get_usage_by_hashes(self, hashes: Sequence[str]) -> list[TFact]:
        """Return every fact stored for ``hashes`` in one read.

        Empty input (or only empty strings) is rejected; callers bound the size.
        """

        if not hashes or all(not content_hash for content_hash in hashes):
            raise InputError("no hashes to query")
        self._cancellation.raise_if_cancelled()
        facts = list(self._store.find_by_hashes([h for h in hashes if h]))
        log.debug("Found %d usage facts for %d hashes", len(facts), len(hashes))
        return facts

    def get_usage_in_chunks(self, hashes: Iterable[str], *, chunk_size: int) -> list[TFact]:
        """Look up usable hashes in reads of at most ``chunk_size`` hashes each."""

        usable = list(dict.fromkeys(h for h in hashes if not is_no_data_hash(h)))
        facts: list[TFact] = []
        for start in range(0, len(usable), chunk_size):
            facts.extend(self.get_usage_by_hashes(usable[start : start + chunk_size]))
        return facts


def deduplicate_facts[TFact: (AlgorithmUsage, LibraryDetection)](
    facts: Iterable[TFact],
) -> list[TFact]:
    """Keep the first fact per logical identity, preserving order.

    Algorithm names are reported lower-cased.
    """

    seen: set[Hashable] = set()
    unique: list[TFact] = []
    for fact in facts:
        key = fact.identity
        if key in seen:
            continue
        seen.add(key)
        if isinstance(fact, AlgorithmUsage):
            fact = replace(fact, algorithm=fact.algorithm.lower())  # noqa: PLW2901
        unique.append(fact)
    return unique
