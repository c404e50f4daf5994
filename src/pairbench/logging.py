"""Logging setup for pairbench.

Log records go to stderr so they never interleave with the progress
line and the report table on stdout.  A log file, when given, always
receives DEBUG records.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_LOGGER_NAME = "pairbench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"
_VERBOSE_CONSOLE_FORMAT = "%(levelname)-8s %(name)s: %(message)s"


def _console_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the ``pairbench`` logger for one CLI invocation.

    Args:
        verbose: Show DEBUG records on the console, including per-spec timings.
        quiet: Only show warnings and errors.  *verbose* wins over *quiet*.
        log_file: Also write DEBUG records to this file.

    Returns:
        The configured ``pairbench`` logger.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Replace handlers from an earlier invocation in the same process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_console_level(verbose, quiet))
    console.setFormatter(
        logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT)
    )
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the ``pairbench.<name>`` child logger."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
