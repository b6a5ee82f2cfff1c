from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from florasynth.app import (
    clear_lookup_cache,
    describe_schema,
    process_batch,
    process_entity,
    process_field,
)
from florasynth.common.logging import configure_logging
from florasynth.config import BatchConfig, ConfigurationError
from florasynth.domain.errors import ConfigError, ContractError, CycleError, SinkError
from florasynth.domain.synthesis import ModuleStatus
from florasynth.domain.types import EntityKey

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from florasynth.domain.synthesis import RunReport

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

SCHEMA_KEYS = ("header", "columnId", "source", "algorithm", "module")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Aggregate botanical facts per species")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at debug level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Run every enabled module for one species")
    process.add_argument("genus", type=str)
    process.add_argument("species", type=str)
    process.add_argument(
        "--force-refresh",
        action="store_true",
        help="Ignore cached tier answers",
    )

    batch = subparsers.add_parser("batch", help="Process several species into a workbook")
    batch.add_argument(
        "binomials",
        nargs="+",
        help="Species as 'Genus species' or Genus_species",
    )
    batch.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of species processed concurrently",
    )
    batch.add_argument(
        "--force-refresh",
        action="store_true",
        help="Ignore cached tier answers",
    )
    batch.add_argument(
        "--no-output",
        action="store_true",
        help="Do not write a workbook",
    )

    field = subparsers.add_parser("field", help="Run the three tiers for one field")
    field.add_argument("field_id", type=str)
    field.add_argument("genus", type=str)
    field.add_argument("species", type=str)
    field.add_argument(
        "--force-refresh",
        action="store_true",
        help="Ignore cached tier answers",
    )

    subparsers.add_parser("schema", help="Print the output columns of the enabled modules")

    clear = subparsers.add_parser("clear-cache", help="Drop cached GBIF and search lookups")
    clear.add_argument(
        "--namespace",
        type=str,
        help="Only clear one lookup namespace, e.g. gbif-synonyms",
    )

    return parser.parse_args(list(argv))


def _parse_entities(binomials: Sequence[str]) -> tuple[list[EntityKey], int]:
    """Parse each binomial on its own; malformed ones are logged and counted."""

    entities: list[EntityKey] = []
    invalid = 0
    for binomial in binomials:
        try:
            entities.append(EntityKey.parse(binomial))
        except ValueError as exc:
            log.error("Skipping %r: %s", binomial, exc)
            invalid += 1
    return entities, invalid


def _emit(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def _log_outcomes(report: RunReport) -> None:
    for outcome in report.outcomes:
        if outcome.status is ModuleStatus.SUCCEEDED:
            log.info("%s: %s", outcome.module_id, outcome.status)
        else:
            log.warning("%s: %s (%s)", outcome.module_id, outcome.status, outcome.reason)


def _run(args: argparse.Namespace) -> int:
    if args.command == "process":
        report = process_entity(
            EntityKey.of(args.genus, args.species),
            force_refresh=args.force_refresh,
        )
        _log_outcomes(report)
        if report.critical_failure:
            log.error("%s failed critical module %s", report.entity, report.aborted_by)
            return EXIT_FAILURE
        _emit(report.record)
        return EXIT_OK

    if args.command == "batch":
        if args.workers < 1:
            raise ValueError("--workers must be at least 1")
        entities, invalid = _parse_entities(args.binomials)
        if not entities:
            log.error("No valid plant records")
            return EXIT_FAILURE
        batch, _sink = process_batch(
            entities,
            batch=BatchConfig(max_workers=args.workers, force_refresh=args.force_refresh),
            write_output=not args.no_output,
        )
        if not batch.records:
            log.error("No valid plant records")
            return EXIT_FAILURE
        return EXIT_FAILURE if batch.failures or invalid else EXIT_OK

    if args.command == "field":
        result = process_field(
            EntityKey.of(args.genus, args.species),
            args.field_id,
            force_refresh=args.force_refresh,
        )
        _emit(result.to_document())
        return EXIT_FAILURE if result.all_failed else EXIT_OK

    if args.command == "schema":
        schema = describe_schema()
        _emit(
            [
                dict(zip(SCHEMA_KEYS, row, strict=True))
                for row in schema.documentation_rows()
            ]
        )
        return EXIT_OK

    if args.command == "clear-cache":
        clear_lookup_cache(args.namespace)
        return EXIT_OK

    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        exit_code = _run(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE)
    except (ConfigurationError, ConfigError, ContractError, CycleError):
        log.exception("Invalid configuration")
        sys.exit(EXIT_USAGE)
    except SinkError:
        log.exception("Could not write output")
        sys.exit(EXIT_FAILURE)
    except Exception:
        log.exception("Fatal error")
        sys.exit(EXIT_FAILURE)
    sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
