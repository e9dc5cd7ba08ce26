"""StakeGov structured logging.

Structured log entries with governance context, JSON/text formatting and
console/in-memory handlers.
"""

from .core import (
    LogConfig,
    LogContext,
    LogEntry,
    LogFormatter,
    LogHandler,
    LogLevel,
    LogManager,
    StakeGovLogger,
    get_log_manager,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .formatters import JSONFormatter, TextFormatter
from .handlers import ConsoleHandler, MemoryHandler

__all__ = [
    "LogLevel",
    "LogContext",
    "LogEntry",
    "LogConfig",
    "LogFormatter",
    "LogHandler",
    "LogManager",
    "StakeGovLogger",
    "get_log_manager",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    "JSONFormatter",
    "TextFormatter",
    "ConsoleHandler",
    "MemoryHandler",
]
