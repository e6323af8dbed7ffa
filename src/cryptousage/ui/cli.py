from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, replace
from itertools import zip_longest
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from cryptousage.app import (
    build_aggregator,
    get_algorithms_in_range,
    get_components_algorithms,
    get_libraries_in_range,
    upgrade_database,
)
from cryptousage.config import configure_logging, get_query_config
from cryptousage.domain.errors import BatchCancelledError, StorageError
from cryptousage.ui.schema import (
    PurlBatchRequest,
    algorithms_in_range_response,
    algorithms_response,
    libraries_in_range_response,
    versions_in_range_response,
)
from cryptousage.ui.status import ResponseCardinality, derive_status

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from pydantic import BaseModel

    from cryptousage.domain.aggregation import Aggregator
    from cryptousage.domain.model import BatchResult, ComponentRequest
    from cryptousage.ui.status import ResponseStatus

log = logging.getLogger(__name__)

EXIT_FAILED = 1
EXIT_INVALID_INPUT = 2


@dataclass(frozen=True, slots=True)
class _QueryCommand:
    help: str
    run: Callable[..., BatchResult]
    render: Callable[[BatchResult, ResponseStatus], BaseModel]


_QUERY_COMMANDS: dict[str, _QueryCommand] = {
    "algorithms": _QueryCommand(
        help="Algorithms used by the best matching version of each component",
        run=get_components_algorithms,
        render=algorithms_response,
    ),
    "algorithms-in-range": _QueryCommand(
        help="Algorithms used by any version inside each requirement",
        run=get_algorithms_in_range,
        render=algorithms_in_range_response,
    ),
    "libraries-in-range": _QueryCommand(
        help="Cryptographic libraries detected in any version inside each requirement",
        run=get_libraries_in_range,
        render=libraries_in_range_response,
    ),
    "versions-in-range": _QueryCommand(
        help="Versions inside each requirement, split by whether they use cryptography",
        run=get_algorithms_in_range,
        render=versions_in_range_response,
    ),
}


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Query cryptographic usage of components")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, command in _QUERY_COMMANDS.items():
        query = subparsers.add_parser(name, help=command.help)
        query.add_argument(
            "--input",
            type=str,
            help='JSON request file ({"purls": [{"purl": ..., "requirement": ...}]}), '
            "'-' for stdin",
        )
        query.add_argument(
            "--purl",
            action="append",
            default=[],
            help="Package URL to query (repeatable)",
        )
        query.add_argument(
            "--requirement",
            action="append",
            default=[],
            help="Version requirement for the --purl at the same position (repeatable)",
        )
        query.add_argument(
            "--workers",
            type=int,
            help="Number of components processed concurrently (defaults to config)",
        )
        query.add_argument(
            "--strict-requirements",
            action="store_true",
            default=None,
            help="Reject requirements that are not lists of full semantic versions",
        )

    db = subparsers.add_parser("db", help="Local catalog database commands")
    db_sub = db.add_subparsers(dest="db_command", required=True)
    db_upgrade = db_sub.add_parser("upgrade", help="Create or upgrade the catalog schema")
    db_upgrade.add_argument(
        "--database-uri",
        type=str,
        help="Database to upgrade (defaults to config)",
    )

    return parser.parse_args(list(argv))


def _load_requests(args: argparse.Namespace) -> tuple[list[ComponentRequest], ResponseCardinality]:
    if args.purl:
        if args.input:
            raise ValueError("Use either --input or --purl, not both")
        if args.requirement and len(args.requirement) != len(args.purl):
            raise ValueError("Pass one --requirement per --purl, or none at all")
        batch = PurlBatchRequest.model_validate(
            {
                "purls": [
                    {"purl": purl, "requirement": requirement}
                    for purl, requirement in zip_longest(args.purl, args.requirement)
                ]
            }
        )
        cardinality = (
            ResponseCardinality.SINGLE if len(args.purl) == 1 else ResponseCardinality.MANY
        )
        return batch.to_requests(), cardinality

    if args.requirement:
        raise ValueError("--requirement needs a matching --purl")
    if args.input and args.input != "-":
        payload = Path(args.input).read_text(encoding="utf-8")
    else:
        payload = sys.stdin.read()
    batch = PurlBatchRequest.model_validate_json(payload)
    return batch.to_requests(), ResponseCardinality.MANY


def _build_query_aggregator(args: argparse.Namespace) -> Aggregator:
    config = get_query_config()
    if args.workers is not None:
        if args.workers < 1:
            raise ValueError("--workers must be at least 1")
        config = replace(config, workers=args.workers)
    if args.strict_requirements is not None:
        config = replace(config, strict_requirements=args.strict_requirements)
    return build_aggregator(query_config=config)


def _run_query(
    command: _QueryCommand,
    requests: list[ComponentRequest],
    cardinality: ResponseCardinality,
    aggregator: Aggregator,
) -> bool:
    result = command.run(requests, aggregator=aggregator)
    status = derive_status(result.summary, cardinality=cardinality)
    response = command.render(result, status)
    sys.stdout.write(response.model_dump_json(indent=2) + "\n")
    return not status.failed


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])

    parsed_args = _parse_args(args_list)
    command = _QUERY_COMMANDS.get(parsed_args.command)

    if parsed_args.command == "db":
        try:
            uri = upgrade_database(database_uri=parsed_args.database_uri)
        except Exception:
            log.exception("Fatal error while upgrading the catalog schema")
            sys.exit(EXIT_FAILED)
        log.info("Catalog schema at %s is up to date", uri)
        return

    if command is None:
        log.error("Unsupported command: %s", parsed_args.command)
        sys.exit(EXIT_INVALID_INPUT)

    try:
        requests, cardinality = _load_requests(parsed_args)
        aggregator = _build_query_aggregator(parsed_args)
    except (OSError, ValueError):
        log.exception("CLI validation error")
        sys.exit(EXIT_INVALID_INPUT)
    except Exception:
        log.exception("Failed to initialise the catalog query")
        sys.exit(EXIT_FAILED)

    try:
        succeeded = _run_query(command, requests, cardinality, aggregator)
    except ValueError:
        log.exception("Invalid request")
        sys.exit(EXIT_INVALID_INPUT)
    except (StorageError, BatchCancelledError):
        log.exception("Query aborted")
        sys.exit(EXIT_FAILED)
    except Exception:
        log.exception("Fatal error during query")
        sys.exit(EXIT_FAILED)

    if not succeeded:
        sys.exit(EXIT_FAILED)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
