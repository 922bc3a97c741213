"""Command-line interface for the Southwest scraper"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from . import __version__
from .config import DEFAULT_LOG_FILE, DEFAULT_SCREENSHOT_DIR, MAX_ATTEMPTS
from .date_utils import parse_date_list
from .diagnostics import DebugConsole
from .logging_config import setup_logging
from .models import SearchSettings, normalize_airport_code
from .orchestrator import SearchOrchestrator
from .surface import CamoufoxSurface

EPILOG = """\
examples:
  swa-scraper --origin SFO,SJC --destination BUR,LAX --date 2023-03-22
  swa-scraper --origin SJC --destination BUR --date 2023-03-22:2023-03-24 --allow-stop
"""


def airport_list(value: str) -> List[str]:
    """argparse type for comma separated airport codes"""
    try:
        codes = [normalize_airport_code(code) for code in value.split(",") if code.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    if not codes:
        raise argparse.ArgumentTypeError("at least one airport code is required")
    return codes


def date_list(value: str):
    """argparse type for comma separated dates and date ranges"""
    try:
        return parse_date_list(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swa-scraper",
        description="Southwest Airlines one-way fare scraper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )

    search_group = parser.add_argument_group("Flight Search")
    search_group.add_argument(
        "--origin",
        type=airport_list,
        required=True,
        help="Comma separated airport codes, e.g. SFO,SJC",
    )
    search_group.add_argument(
        "--destination",
        type=airport_list,
        required=True,
        help="Comma separated airport codes, e.g. BUR,LAX",
    )
    search_group.add_argument(
        "--date",
        type=date_list,
        required=True,
        help="Comma separated dates or ranges, e.g. 2023-03-22,2023-03-24 or 2023-03-22:2023-03-24",
    )
    search_group.add_argument(
        "--allow-stop",
        action="store_true",
        help="Allow flights with stops. Will show anyways if there is no non-stop",
    )

    browser_group = parser.add_argument_group("Browser")
    browser_group.add_argument(
        "--debug",
        action="store_true",
        help="Visible browser, one attempt per step, screenshots and a console on failure",
    )
    browser_group.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force headless mode on or off (default: headless unless --debug)",
    )
    browser_group.add_argument(
        "--screenshot-dir",
        type=str,
        default=str(DEFAULT_SCREENSHOT_DIR),
        help="Directory for debug screenshots",
    )

    config_group = parser.add_argument_group("Configuration")
    config_group.add_argument(
        "--max-attempts",
        type=int,
        default=MAX_ATTEMPTS,
        help=f"Attempts per step and per search (default: {MAX_ATTEMPTS}, 1 with --debug)",
    )
    config_group.add_argument(
        "--reset-throttle",
        action="store_true",
        help="Start every search with no backoff instead of carrying it over",
    )
    config_group.add_argument("--verbose", action="store_true", help="Debug logging")
    config_group.add_argument("--log-file", type=str, help="Log file path")

    return parser


def settings_from_args(args: argparse.Namespace) -> SearchSettings:
    if args.max_attempts < 1:
        raise ValueError("--max-attempts must be at least 1")
    return SearchSettings(
        allow_stops=args.allow_stop,
        debug=args.debug,
        headless=args.headless,
        max_attempts=args.max_attempts,
        carry_throttle_state=not args.reset_throttle,
        screenshot_dir=Path(args.screenshot_dir),
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else DEFAULT_LOG_FILE
    setup_logging(verbose=args.verbose, log_file=log_file)

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    logger.info("=" * 60)
    logger.info(f"SWA Flight Scraper (v{__version__})")
    logger.info("=" * 60)
    logger.info(f"Origins:       {', '.join(args.origin)}")
    logger.info(f"Destinations:  {', '.join(args.destination)}")
    logger.info(f"Dates:         {', '.join(d.isoformat() for d in args.date)}")
    logger.info(
        f"Total combos:  {len(args.origin) * len(args.destination) * len(args.date)}"
    )
    if settings.debug:
        logger.info("Debug mode:    single attempt, screenshots, console on failure")
    logger.info("=" * 60)

    async def run():
        try:
            surface = await CamoufoxSurface.launch(headless=settings.effective_headless)
            orchestrator = SearchOrchestrator(
                surface,
                settings,
                console=DebugConsole() if settings.debug else None,
            )
            await orchestrator.run(args.origin, args.destination, args.date)

        except KeyboardInterrupt:
            logger.warning("Interrupted by user")
            sys.exit(1)
        except Exception as e:
            logger.exception(f"Fatal error: {e}")
            sys.exit(1)

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
