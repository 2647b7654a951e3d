"""
Aggregator CLI: IPO Ninja allotment lookups.

Usage:
    # IPOs whose allotment is out
    python -m ipo_data_hub.cli aggregator allotted-list

    # Check several PANs for one IPO
    python -m ipo_data_hub.cli aggregator check --ipo-id 101 --pan ABCDE1234F --pan PQRST6789Z
"""

import argparse
from typing import List, Optional

from ipo_data_hub.domain.allotment.models import AllotmentValidationError
from ipo_data_hub.io.connectors.aggregator import AggregatorClientError, IpoNinjaClient

from .output import EXIT_FAILURE, EXIT_OK, emit, emit_error, emit_validation_error


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ipo_data_hub.cli aggregator",
        description="Query the IPO Ninja allotment aggregator",
    )
    subparsers = parser.add_subparsers(
        title="operations",
        dest="operation",
        required=True,
        help="Aggregator operation to perform",
    )

    subparsers.add_parser("allotted-list", help="List IPOs whose allotment is out")

    check_parser = subparsers.add_parser("check", help="Check allotment for one or more PANs")
    check_parser.add_argument("--ipo-id", required=True, help="Aggregator IPO id")
    check_parser.add_argument(
        "--pan",
        action="append",
        required=True,
        dest="pans",
        help="PAN to check (repeatable)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point for aggregator operations.

    Returns:
        Exit code (0 for success, 2 for invalid input, 1 for other failures)
    """
    args = build_parser().parse_args(argv)
    client = IpoNinjaClient()

    try:
        if args.operation == "allotted-list":
            ipos = client.list_allotted_ipos()
            emit({"data": ipos, "totalCount": len(ipos)})
            return EXIT_OK
        if args.operation == "check":
            batch = client.check_allotment(args.ipo_id, args.pans)
            emit(batch.to_public_dict())
            return EXIT_OK
    except AllotmentValidationError as e:
        return emit_validation_error(e)
    except AggregatorClientError as e:
        emit_error(str(e))
        return EXIT_FAILURE

    return EXIT_FAILURE
