"""
Allotment CLI: registrar lookups through the allotment service.

Usage:
    # Check every registrar in configuration order
    python -m ipo_data_hub.cli allotment check --pan ABCDE1234F --ipo "Midwest Limited"

    # Check one registrar
    python -m ipo_data_hub.cli allotment check --pan ABCDE1234F --ipo 42 --registrar bigshare

    # Supported registrars
    python -m ipo_data_hub.cli allotment registrars

    # Resolution cache statistics
    python -m ipo_data_hub.cli allotment cache-stats --registrar mufg
"""

import argparse
from typing import List, Optional

from ipo_data_hub.config.registrars import RegistrarConfigError
from ipo_data_hub.domain.allotment.models import AllotmentValidationError, RegistrarId
from ipo_data_hub.domain.allotment.service import AllotmentService
from ipo_data_hub.infrastructure.factory import build_allotment_service

from .output import EXIT_FAILURE, EXIT_OK, emit, emit_error, emit_validation_error


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ipo_data_hub.cli allotment",
        description="Check IPO allotment status against registrar sites",
    )
    subparsers = parser.add_subparsers(
        title="operations",
        dest="operation",
        required=True,
        help="Allotment operation to perform",
    )

    check_parser = subparsers.add_parser("check", help="Check allotment status for one PAN")
    check_parser.add_argument("--pan", required=True, help="Applicant PAN, e.g. ABCDE1234F")
    check_parser.add_argument(
        "--ipo", required=True, help="Registrar company code or IPO name"
    )
    check_parser.add_argument(
        "--registrar",
        default=None,
        help=f"Restrict to one registrar ({', '.join(r.value for r in RegistrarId)})",
    )

    subparsers.add_parser("registrars", help="List supported registrars")

    stats_parser = subparsers.add_parser(
        "cache-stats", help="Show identifier resolution cache contents"
    )
    stats_parser.add_argument("--registrar", required=True, help="Registrar id")
    return parser


def _execute_check(service: AllotmentService, args: argparse.Namespace) -> int:
    outcome = service.check_allotment(args.pan, args.ipo, args.registrar)
    if isinstance(outcome, list):
        emit([result.to_public_dict() for result in outcome])
    else:
        emit(outcome.to_public_dict())
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point for allotment operations.

    Returns:
        Exit code (0 for success, 2 for invalid input, 1 for other failures)
    """
    args = build_parser().parse_args(argv)

    try:
        service = build_allotment_service()
    except RegistrarConfigError as e:
        emit_error(f"Invalid registrar configuration: {e}")
        return EXIT_FAILURE

    try:
        if args.operation == "check":
            return _execute_check(service, args)
        if args.operation == "registrars":
            emit([profile.to_dict() for profile in service.list_supported_registrars()])
            return EXIT_OK
        if args.operation == "cache-stats":
            emit(service.cache_stats(args.registrar))
            return EXIT_OK
    except AllotmentValidationError as e:
        return emit_validation_error(e)

    return EXIT_FAILURE
