"""Batch aggregation: resolve every identifier, load its usage facts, summarize."""

from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .cancellation import CancellationToken
from .catalog import CatalogResolver
from .errors import InputError, ParseError
from .identifiers import parse_identifier
from .model import (
    BatchResult,
    FactKind,
    Outcome,
    OutputItem,
    SelectionMode,
    SummaryBuilder,
)
from .ports import NullBatchMetrics
from .requirements import compile_constraint, is_wildcard_requirement, validate_requirement
from .usage import UsageLookup, deduplicate_facts
from .versions import (
    VersionGroup,
    group_by_version,
    rows_for_version,
    select_all_in_range,
    select_best,
)

DEFAULT_WORKERS = 1
DEFAULT_MAX_HASHES_PER_QUERY = 500

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .model import CatalogRecord, ComponentRequest, Identifier, UsageFact
    from .ports import BatchMetrics, QueryRepositories, QueryUnitOfWork
    from .requirements import Constraint

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BatchOptions:
    """Execution knobs for one ``Aggregator``."""

    workers: int = DEFAULT_WORKERS
    max_hashes_per_query: int = DEFAULT_MAX_HASHES_PER_QUERY
    strict_requirements: bool = False
    timeout_seconds: float | None = None


@dataclass(frozen=True, slots=True)
class _Processed:
    item: OutputItem
    skipped_versions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class _Resolution:
    groups: tuple[VersionGroup, ...] = ()
    skipped_versions: tuple[str, ...] = ()


@dataclass(slots=True)
class _IdentifierPipeline:
    """Runs the per-identifier stages against one set of repositories."""

    repositories: QueryRepositories
    mode: SelectionMode
    kind: FactKind
    options: BatchOptions
    cancellation: CancellationToken
    _resolver: CatalogResolver = field(init=False)

    def __post_init__(self) -> None:
        self._resolver = CatalogResolver(self.repositories.catalog, cancellation=self.cancellation)

    def process(self, request: ComponentRequest) -> _Processed:
        self.cancellation.raise_if_cancelled()
        try:
            identifier = parse_identifier(request.purl, request.requirement)
            constraint = self._compile(identifier)
        except ParseError as exc:
            log.warning("Failed to parse purl '%s': %s", request.purl, exc)
            return _Processed(
                OutputItem(
                    identifier=request.purl,
                    outcome=Outcome.PARSE_FAILURE,
                    requirement=request.requirement,
                )
            )

        resolution = self._resolve(identifier, constraint)
        if not resolution.groups:
            if resolution.skipped_versions:
                log.warning(
                    "No semantic version found for %s (versions: %s)",
                    request.purl,
                    ", ".join(resolution.skipped_versions),
                )
            else:
                log.info("Component %s not found", request.purl)
            return _Processed(
                OutputItem(
                    identifier=request.purl,
                    outcome=Outcome.NOT_FOUND,
                    requirement=identifier.requirement,
                ),
                skipped_versions=resolution.skipped_versions,
            )

        versions = tuple(group.label for group in resolution.groups)
        facts, versions_with_facts = self._load_facts(resolution.groups)
        outcome = Outcome.FOUND if facts else Outcome.NO_INFO
        if outcome is Outcome.NO_INFO:
            log.info("No %s info for %s (versions: %s)", self.kind, request.purl, versions)
        return _Processed(
            OutputItem(
                identifier=request.purl,
                outcome=outcome,
                requirement=identifier.requirement,
                versions=versions,
                versions_with_facts=versions_with_facts,
                facts=tuple(facts),
            )
        )

    def _compile(self, identifier: Identifier) -> Constraint | None:
        requirement = identifier.requirement
        if identifier.promoted and identifier.version:
            return compile_constraint(identifier.version)
        if not requirement:
            if self.mode is SelectionMode.RANGE and not identifier.has_version:
                raise ParseError("requirement should include a version range", raw=identifier.raw)
            return None
        if is_wildcard_requirement(requirement):
            raise ParseError(
                f"wildcard requirement {requirement!r} is not allowed", raw=requirement
            )
        if self.options.strict_requirements and not validate_requirement(requirement):
            raise ParseError(f"invalid requirement {requirement!r}", raw=requirement)
        return compile_constraint(requirement)

    def _resolve(self, identifier: Identifier, constraint: Constraint | None) -> _Resolution:
        if identifier.version:
            records = self._resolver.exact(
                identifier.name, identifier.ecosystem, identifier.version
            )
            if records or not identifier.promoted:
                if self.mode is SelectionMode.RANGE:
                    return _Resolution(groups=tuple(select_all_in_range(records)))
                return self._best(records, None)
            log.debug(
                "No catalog label %r for %s, matching by version value",
                identifier.version,
                identifier.raw,
            )

        if self.mode is SelectionMode.RANGE:
            match = self._resolver.in_range(identifier.name, identifier.ecosystem, constraint)
            return _Resolution(
                groups=tuple(select_all_in_range(match.records)),
                skipped_versions=match.skipped_versions if match.all_unparsable else (),
            )

        records = self._resolver.loose(identifier.name, identifier.ecosystem)
        return self._best(records, constraint)

    @staticmethod
    def _best(records: Sequence[CatalogRecord], constraint: Constraint | None) -> _Resolution:
        if not records:
            return _Resolution()
        selected = select_best(records, constraint)
        if selected is None:
            return _Resolution()
        siblings = rows_for_version(records, selected)
        return _Resolution(groups=tuple(group_by_version(siblings)))

    def _load_facts(
        self, groups: Sequence[VersionGroup]
    ) -> tuple[list[UsageFact], tuple[str, ...]]:
        hashes = [content_hash for group in groups for content_hash in group.content_hashes]
        chunk_size = self.options.max_hashes_per_query
        raw_facts: list[UsageFact]
        match self.kind:
            case FactKind.ALGORITHMS:
                algorithms = UsageLookup(
                    self.repositories.algorithms, cancellation=self.cancellation
                )
                found_algorithms = algorithms.get_usage_in_chunks(hashes, chunk_size=chunk_size)
                raw_facts = list(found_algorithms)
                facts: list[UsageFact] = list(deduplicate_facts(found_algorithms))
            case FactKind.LIBRARIES:
                libraries = UsageLookup(self.repositories.libraries, cancellation=self.cancellation)
                found_libraries = libraries.get_usage_in_chunks(hashes, chunk_size=chunk_size)
                raw_facts = list(found_libraries)
                facts = list(deduplicate_facts(found_libraries))

        hashes_with_facts = {fact.content_hash for fact in raw_facts}
        versions_with_facts = tuple(
            group.label
            for group in groups
            if any(content_hash in hashes_with_facts for content_hash in group.content_hashes)
        )
        return facts, versions_with_facts


class Aggregator:
    """Answers batches of component queries against a catalog."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], QueryUnitOfWork],
        *,
        options: BatchOptions | None = None,
        metrics: BatchMetrics | None = None,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._options = options or BatchOptions()
        self._metrics = metrics or NullBatchMetrics()

    @property
    def options(self) -> BatchOptions:
        return self._options

    def run(
        self,
        requests: Sequence[ComponentRequest],
        *,
        mode: SelectionMode,
        kind: FactKind,
        cancellation: CancellationToken | None = None,
    ) -> BatchResult:
        """Process every request and return per-item results plus the batch summary.

        Per-identifier failures are classified in the summary. Storage failures and
        cancellation abort the whole call.
        """

        if not requests:
            raise InputError("empty list of purls")
        token = cancellation or CancellationToken.with_timeout(self._options.timeout_seconds)

        started = time.perf_counter()
        if self._options.workers > 1 and len(requests) > 1:
            processed = self._run_concurrently(requests, mode=mode, kind=kind, cancellation=token)
        else:
            processed = self._run_sequentially(requests, mode=mode, kind=kind, cancellation=token)
        elapsed = time.perf_counter() - started

        builder = SummaryBuilder(total=len(requests))
        for entry in processed:
            builder.record(entry.item, skipped_versions=entry.skipped_versions)
        summary = builder.build()

        self._metrics.record_batch(mode=mode, kind=kind, elapsed_seconds=elapsed, summary=summary)
        log.info(
            "Processed %d purls (%s %s) in %.3fs: %d found, %d failed to parse, "
            "%d not found, %d without info, %d without semver",
            summary.total,
            mode,
            kind,
            elapsed,
            summary.found,
            len(summary.failed_to_parse),
            len(summary.not_found),
            len(summary.without_info),
            len(summary.without_semver),
        )
        return BatchResult(items=tuple(entry.item for entry in processed), summary=summary)

    def algorithms(
        self,
        requests: Sequence[ComponentRequest],
        *,
        cancellation: CancellationToken | None = None,
    ) -> BatchResult:
        """Algorithms used by the best matching version of each component."""

        return self.run(
            requests, mode=SelectionMode.BEST, kind=FactKind.ALGORITHMS, cancellation=cancellation
        )

    def algorithms_in_range(
        self,
        requests: Sequence[ComponentRequest],
        *,
        cancellation: CancellationToken | None = None,
    ) -> BatchResult:
        return self.run(
            requests, mode=SelectionMode.RANGE, kind=FactKind.ALGORITHMS, cancellation=cancellation
        )

    def libraries_in_range(
        self,
        requests: Sequence[ComponentRequest],
        *,
        cancellation: CancellationToken | None = None,
    ) -> BatchResult:
        return self.run(
            requests, mode=SelectionMode.RANGE, kind=FactKind.LIBRARIES, cancellation=cancellation
        )

    def _pipeline(
        self,
        repositories: QueryRepositories,
        *,
        mode: SelectionMode,
        kind: FactKind,
        cancellation: CancellationToken,
    ) -> _IdentifierPipeline:
        return _IdentifierPipeline(
            repositories=repositories,
            mode=mode,
            kind=kind,
            options=self._options,
            cancellation=cancellation,
        )

    def _run_sequentially(
        self,
        requests: Sequence[ComponentRequest],
        *,
        mode: SelectionMode,
        kind: FactKind,
        cancellation: CancellationToken,
    ) -> list[_Processed]:
        with self._unit_of_work_factory() as uow:
            pipeline = self._pipeline(
                uow.repositories, mode=mode, kind=kind, cancellation=cancellation
            )
            return [pipeline.process(request) for request in requests]

    def _run_isolated(
        self,
        request: ComponentRequest,
        *,
        mode: SelectionMode,
        kind: FactKind,
        cancellation: CancellationToken,
    ) -> _Processed:
        cancellation.raise_if_cancelled()
        with self._unit_of_work_factory() as uow:
            pipeline = self._pipeline(
                uow.repositories, mode=mode, kind=kind, cancellation=cancellation
            )
            return pipeline.process(request)

    def _run_concurrently(
        self,
        requests: Sequence[ComponentRequest],
        *,
        mode: SelectionMode,
        kind: FactKind,
        cancellation: CancellationToken,
    ) -> list[_Processed]:
        batch_token = cancellation.child()
        workers = min(self._options.workers, len(requests))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cryptousage") as executor:
            futures = [
                executor.submit(
                    self._run_isolated, request, mode=mode, kind=kind, cancellation=batch_token
                )
                for request in requests
            ]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            if pending:
                batch_token.cancel()
                for future in pending:
                    future.cancel()
                failure = next(
                    error
                    for future in futures
                    if future in done and (error := future.exception()) is not None
                )
                raise failure
            return [future.result() for future in futures]
