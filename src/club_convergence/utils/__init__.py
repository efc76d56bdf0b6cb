"""Utils module - Logging and utility functions"""

from .logging import setup_logging, get_logger, log_exception, LogContext

__all__ = [
    "setup_logging",
    "get_logger",
    "log_exception",
    "LogContext",
]
