"""CLI entry point for allocating a single expense.

Usage:
    python -m src.cli.allocate <expense_id>
    allocate <expense_id>  (installed console script)

Exit Codes:
    0 - Success: allocation written, result printed to stdout as JSON
    1 - Failure: error logged to stderr and the log file; prior allocation left untouched

Logging:
    Log records go to stderr and logs/allocate.log so stdout stays parseable
"""

import argparse
import json
import logging
import sys

from src.services.config import load_config
from src.services.errors import AllocationError
from src.services.logging import setup_cli_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="allocate",
        description="Allocate one expense across the units in its scope",
    )
    parser.add_argument("expense_id", type=int, help="ID of the expense to allocate")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the allocation CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse already printed usage; normalize every failure to 1
        return 0 if e.code == 0 else 1

    try:
        config = load_config()
        setup_cli_logging(config.cli_log_file)
        logger.info("Allocating expense %d...", args.expense_id)

        from src.services import SessionLocal
        from src.services.allocation_service import AllocationService

        db = SessionLocal()
        try:
            result = AllocationService(db).allocate(args.expense_id)
        finally:
            db.close()

        print(json.dumps(result.to_dict(), indent=2))
        return 0

    except KeyboardInterrupt:
        logger.warning("Allocation interrupted by user")
        return 1
    except AllocationError as e:
        logger.error("Allocation of expense %s failed: %s", args.expense_id, e)
        return 1
    except Exception as e:
        logger.error("Allocation of expense %s failed: %s", args.expense_id, e, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
