"""Command-line entry for edt_gateway."""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from . import run_server


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the edt_gateway CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="edt-gateway",
        description="EDT Gateway - date-filtered timetable API over Celcat iCal feeds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m edt_gateway                    # Start server on default port (5000)
  python -m edt_gateway --port 3000        # Start server on port 3000
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number for the web server (default: 5000, or from EDT_GATEWAY_PORT/PORT)",
    )
    parser.add_argument(
        "--host",
        metavar="HOST",
        help="Interface to bind (default: 0.0.0.0, or from EDT_GATEWAY_HOST)",
    )

    return parser


def main(argv: list[str] | None = None) -> NoReturn:
    """Run the edt_gateway CLI."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    run_server(args)
    sys.exit(0)


if __name__ == "__main__":
    main()
