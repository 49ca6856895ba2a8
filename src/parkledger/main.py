# File: src/parkledger/main.py
"""
Main entry point for the parking ledger console
Reads commands from stdin and writes results to stdout; logs go to stderr.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .application.parking_service import ParkingServiceFactory
from .domain.exceptions import ResourceExhaustionError
from .infrastructure.repositories import DEFAULT_MAX_FACILITIES
from .presentation.console import ConsoleApp


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """Setup application logging configuration"""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )
    return logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parkledger",
        description="In-memory parking ledger: facilities, entries, exits and revenue"
    )
    parser.add_argument(
        "--max-facilities",
        type=int,
        default=DEFAULT_MAX_FACILITIES,
        help=f"maximum number of facilities (default: {DEFAULT_MAX_FACILITIES})"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="logging level (default: WARNING)"
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="also write logs to this file"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)
    logger = setup_logging(args.log_level, args.log_file)

    service = ParkingServiceFactory.create_service_with_config({
        "max_facilities": args.max_facilities
    })
    app = ConsoleApp(service)

    try:
        app.run(sys.stdin, sys.stdout)
    except ResourceExhaustionError as e:
        logger.critical(f"Fatal error: {e}")
        service.shutdown()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
