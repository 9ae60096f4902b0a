"""JSON log output for pallet."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord has, plus those added by formatting and by
# PhaseContextFilter; anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "phase_path",
    "phase_tag",
}


class JSONFormatter(logging.Formatter):
    """Format each record as one JSON object per line.

    Keys: ``timestamp`` (ISO-8601 UTC), ``level``, ``logger``, ``message``,
    then ``phase_path`` when the record was logged inside a phase or while
    an action ran, ``context`` holding values passed with ``extra=``, and
    ``exception`` with the formatted traceback.

    Args:
        include_source: Also emit ``source`` as ``module:lineno``.
    """

    def __init__(self, include_source: bool = False) -> None:
        super().__init__()
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_source:
            entry["source"] = f"{record.module}:{record.lineno}"

        phase_path = getattr(record, "phase_path", None)
        if phase_path:
            entry["phase_path"] = phase_path

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["context"] = extra

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)
