"""Command line interface for single and batch caller lookups."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config import ConfigurationError, load_settings
from .ingestion import export_outcomes, load_lookup_requests
from .orchestrator import BatchLookupService
from .orchestrator.service import DEFAULT_MAX_CONCURRENCY
from .pipeline import resolve_caller
from .rate_limit import RateLimiter


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Optional configuration file (YAML or JSON); environment variables are used otherwise",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Return fixture data instead of calling the upstream API",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Look up who is calling from a phone number")
    subparsers = parser.add_subparsers(dest="command", required=True)

    lookup_parser = subparsers.add_parser("lookup", help="Resolve a single caller and print the result as JSON")
    lookup_parser.add_argument("--phone", default="", help="Phone number in any format")
    lookup_parser.add_argument("--first", default=None, help="Caller first name (name-qualified deployments)")
    lookup_parser.add_argument("--last", default=None, help="Caller last name (name-qualified deployments)")
    _add_common_arguments(lookup_parser)

    batch_parser = subparsers.add_parser("batch", help="Resolve every row of a spreadsheet")
    batch_parser.add_argument("input", help="Path to the input spreadsheet (CSV or XLSX)")
    batch_parser.add_argument("output", help="Path where the outcomes should be written (CSV or XLSX)")
    batch_parser.add_argument(
        "--max-concurrency",
        type=int,
        default=DEFAULT_MAX_CONCURRENCY,
        help="Maximum number of lookups in flight at once",
    )
    batch_parser.add_argument(
        "--rate-limit-per-minute",
        type=float,
        default=None,
        help="Maximum number of upstream calls started per minute",
    )
    batch_parser.add_argument(
        "--raise-on-error",
        action="store_true",
        help="Propagate unexpected exceptions instead of recording them in the output",
    )
    _add_common_arguments(batch_parser)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _run_lookup(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    outcome = asyncio.run(
        resolve_caller(
            args.phone,
            settings,
            first_name=args.first,
            last_name=args.last,
            demo=args.demo,
        )
    )
    print(json.dumps(outcome.as_dict(), indent=2, ensure_ascii=False))
    return 0 if outcome.ok else 1


def _run_batch(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    requests = load_lookup_requests(args.input)
    service = BatchLookupService(
        settings,
        max_concurrency=args.max_concurrency,
        rate_limiter=RateLimiter(args.rate_limit_per_minute),
        demo=args.demo,
        raise_on_error=args.raise_on_error,
    )
    results = service.run_sync(requests)
    export_outcomes(results, args.output)

    failures = sum(1 for result in results if result.outcome.is_failure)
    logging.info("Processed %s lookup requests (%s failed)", len(results), failures)
    logging.info("Outcomes written to %s", Path(args.output).resolve())
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        if args.command == "lookup":
            return _run_lookup(args)
        return _run_batch(args)
    except ConfigurationError as exc:
        logging.error("%s", exc)
        return 2


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
