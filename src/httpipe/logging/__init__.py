"""
Structured logging module.

Provides JSON logging with per-call correlation IDs and context propagation.
"""

from httpipe.logging.context import (
    bind_call_id,
    clear_log_context,
    get_log_context,
    reset_call_id,
    set_log_context,
)
from httpipe.logging.formatters import ConsoleFormatter, JSONFormatter
from httpipe.logging.setup import get_logger, setup_logging
from httpipe.logging.utilities import log_exception, log_with_context

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    "bind_call_id",
    "reset_call_id",
    # Utilities
    "log_with_context",
    "log_exception",
]
