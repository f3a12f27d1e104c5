"""CLI entrypoint for the pizzeria territory allocator."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List

from territory.core.constants import AllocationStatus
from territory.core.exceptions import IncompleteAllocationError, InputFormatError
from territory.engine.allocator import AllocationResult, AllocatorConfig, TerritoryAllocator
from territory.io.parser import read_instances
from territory.io.report import format_report, result_to_jsonable
from territory.utils.logger import configure_logging, get_logger, resolve_level


LOGGER = get_logger("territory.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Partition grids among pizzerias with fixed delivery capacities",
    )
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=Path("input.txt"),
        help="Instance file (default: input.txt)",
    )
    parser.add_argument("--output", type=Path, help="Optional path for the report")
    parser.add_argument(
        "--format",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Report format",
    )
    parser.add_argument(
        "--exact-fallback",
        action="store_true",
        help="Finish stalled cases with the CP-SAT solver",
    )
    parser.add_argument(
        "--exact-timeout",
        type=float,
        default=10.0,
        help="CP-SAT time limit per stalled case in seconds",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any case is left incomplete",
    )
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip the final integrity checks",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def check_complete(results: List[AllocationResult]) -> None:
    for case_no, result in enumerate(results, start=1):
        if result.status != AllocationStatus.COMPLETE:
            raise IncompleteAllocationError(
                f"Case {case_no} ended {result.status.value} with {result.unassigned} free cells"
            )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(resolve_level(args.log_level, default=logging.WARNING))

    if args.exact_timeout <= 0:
        parser.error("--exact-timeout must be positive")

    try:
        instances = read_instances(args.input)
    except OSError as exc:
        parser.error(f"cannot read {args.input}: {exc}")
    except InputFormatError as exc:
        parser.error(f"{args.input}: {exc}")

    config = AllocatorConfig(
        exact_fallback=args.exact_fallback,
        exact_timeout_seconds=args.exact_timeout,
        validate_result=not args.no_validate,
    )
    results = [TerritoryAllocator(instance, config).allocate() for instance in instances]

    if args.format == "json":
        payload = {"cases": [result_to_jsonable(result) for result in results]}
        output_text = json.dumps(payload, indent=2) + "\n"
    else:
        output_text = format_report(results)

    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text, end="")

    if args.strict:
        try:
            check_complete(results)
        except IncompleteAllocationError as exc:
            LOGGER.error("%s", exc)
            return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
