"""
Unified CLI entry point for IPO Data Hub.

Usage:
    python -m ipo_data_hub.cli <command> [options]

Available commands:
    allotment   - Check allotment status against registrar sites
    aggregator  - Query the IPO Ninja allotment aggregator

Examples:
    # Check one PAN across every registrar
    python -m ipo_data_hub.cli allotment check --pan ABCDE1234F --ipo "Midwest Limited"

    # Check one registrar by company code
    python -m ipo_data_hub.cli allotment check --pan ABCDE1234F --ipo 42 --registrar bigshare

    # IPOs whose allotment is out
    python -m ipo_data_hub.cli aggregator allotted-list
"""

import argparse
import sys
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point with subcommand routing.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 2 for invalid input, 1 for other failures)
    """
    parser = argparse.ArgumentParser(
        prog="ipo_data_hub.cli",
        description="IPO Data Hub CLI - allotment status lookups",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check one PAN across every registrar
  python -m ipo_data_hub.cli allotment check --pan ABCDE1234F --ipo "Midwest Limited"

  # List supported registrars
  python -m ipo_data_hub.cli allotment registrars

  # Aggregator batch check
  python -m ipo_data_hub.cli aggregator check --ipo-id 101 --pan ABCDE1234F --pan PQRST6789Z
        """,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
        help="Command to execute",
    )

    subparsers.add_parser(
        "allotment",
        help="Registrar allotment checks",
        description="Check allotment status against registrar sites",
        add_help=False,  # Let the delegated module handle help
    )
    subparsers.add_parser(
        "aggregator",
        help="Allotment aggregator operations",
        description="Query the IPO Ninja allotment aggregator",
        add_help=False,  # Let the delegated module handle help
    )

    args, remaining_args = parser.parse_known_args(argv)

    if args.command == "allotment":
        from ipo_data_hub.cli.allotment import main as allotment_main

        return allotment_main(remaining_args or [])

    elif args.command == "aggregator":
        from ipo_data_hub.cli.aggregator import main as aggregator_main

        return aggregator_main(remaining_args or [])

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
