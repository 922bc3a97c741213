"""Logging configuration using loguru"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

WARNING_LEVEL = logger.level("WARNING").no


def _result_stream(record) -> bool:
    return record["level"].no < WARNING_LEVEL


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Configure loguru for the scraper.

    Route headers and flight rows are logged at INFO and are the program's
    output, so records below WARNING go to stdout with just a timestamp.
    Throttles, failed attempts and errors go to stderr with their level, which
    keeps ``swa-scraper ... > fares.txt`` free of diagnostics.

    Args:
        verbose: Also print DEBUG records (stage transitions, extraction counts)
        log_file: Optional file path for a persistent copy of every record
    """
    logger.remove()

    logger.add(
        sys.stdout,
        format="<green>{time:HH:mm:ss}</green> {message}",
        level="DEBUG" if verbose else "INFO",
        filter=_result_stream,
        colorize=True,
    )
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="WARNING",
        colorize=True,
    )

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            enqueue=True,
        )
        logger.debug(f"Logging to file: {log_file}")
