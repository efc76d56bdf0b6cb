"""
Logging configuration for Club Convergence.

The package only emits records through module loggers under
`club_convergence`; applications call setup_logging() to see them.
"""

import logging
import sys
import time
import warnings
from pathlib import Path
from typing import Optional


PACKAGE_LOGGER = 'club_convergence'

DEFAULT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DETAILED_FORMAT = '%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s'
SIMPLE_FORMAT = '[%(levelname)s] %(message)s'


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    detailed: bool = False,
    quiet: bool = False,
) -> None:
    """
    Route package log records to the console and optionally a file.

    Args:
        level: Level for the package logger and console (default: INFO)
        log_file: Optional path; receives DEBUG records (every merge decision)
        format_string: Console format (overrides detailed/quiet)
        detailed: Console format with file/line info
        quiet: Warnings and errors only
    """
    if quiet:
        level = logging.WARNING
        fmt = format_string or SIMPLE_FORMAT
    else:
        fmt = format_string or (DETAILED_FORMAT if detailed else DEFAULT_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(fmt))
    console_handler.setLevel(level)
    handlers = [console_handler]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    # With a file attached the package logger must let DEBUG through
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if log_file else level)
    logging.getLogger('statsmodels').setLevel(logging.WARNING)

    if quiet:
        # Short log-t samples make statsmodels warn on every regression
        warnings.filterwarnings('ignore', module='statsmodels')


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below the package logger.

    Example:
        logger = get_logger("scripts.merge_regions")
        logger.info("Merging regional clubs...")
    """
    if name == PACKAGE_LOGGER or name.startswith(f'{PACKAGE_LOGGER}.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{PACKAGE_LOGGER}.{name}')


def log_exception(logger: logging.Logger, exc: Exception, context: str = "") -> None:
    """Log an exception with its traceback, prefixed by context."""
    message = f"{context}: {exc}" if context else str(exc)
    logger.error(message, exc_info=exc)


class LogContext:
    """
    Log the start, end and duration of an operation.

    Example:
        with LogContext(logger, "Merging 6 clubs (vLT)", level=logging.DEBUG):
            merged = merger.merge(clubs)
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.elapsed: Optional[float] = None
        self._start: Optional[float] = None

    def __enter__(self) -> 'LogContext':
        self._start = time.perf_counter()
        self.logger.log(self.level, f"{self.operation}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed = time.perf_counter() - self._start

        if exc_type is None:
            self.logger.log(self.level, f"{self.operation} completed in {self.elapsed:.2f}s")
        else:
            self.logger.error(f"{self.operation} failed after {self.elapsed:.2f}s: {exc_val}")

        return False
