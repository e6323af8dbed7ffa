"""Query execution defaults for batch lookups."""

from __future__ import annotations

from dataclasses import dataclass

from cryptousage.domain.aggregation import DEFAULT_MAX_HASHES_PER_QUERY, DEFAULT_WORKERS

from .env import env_bool, env_float, env_int


@dataclass(frozen=True, slots=True)
class QueryConfig:
    workers: int = DEFAULT_WORKERS
    max_hashes_per_query: int = DEFAULT_MAX_HASHES_PER_QUERY
    strict_requirements: bool = False
    timeout_seconds: float | None = None


def get_query_config() -> QueryConfig:
    return QueryConfig(
        workers=env_int("CRYPTOUSAGE_WORKERS", DEFAULT_WORKERS),
        max_hashes_per_query=env_int("CRYPTOUSAGE_MAX_HASHES", DEFAULT_MAX_HASHES_PER_QUERY),
        strict_requirements=env_bool("CRYPTOUSAGE_STRICT_REQUIREMENTS"),
        timeout_seconds=env_float("CRYPTOUSAGE_TIMEOUT_SECONDS"),
    )
