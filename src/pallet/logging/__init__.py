"""Logging setup for pallet.

Provides configurable logging with JSON format support and file rotation.
Log records carry the phase context of the action being planned or run.
"""

from pallet.logging.config import configure_logging
from pallet.logging.context import PhaseContextFilter, current_log_context
from pallet.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "PhaseContextFilter",
    "configure_logging",
    "current_log_context",
]
