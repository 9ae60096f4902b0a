"""Phase context injection for log records.

Adds the current phase context path to every log record, so log lines
written while an action executes say where the action was declared.
"""

from __future__ import annotations

import logging

from pallet.context import get_defining_context, phase_contexts


def current_log_context() -> tuple[str, ...]:
    """Return the context to attach to log records.

    The defining context of the executing action wins over the phase path
    being built.
    """
    defining = get_defining_context()
    if defining:
        return defining
    return phase_contexts()


class PhaseContextFilter(logging.Filter):
    """Logging filter that injects phase context into log records.

    Adds ``phase_path`` (list of labels) for JSON output and a compact
    ``phase_tag`` like ``[configure: nginx] `` for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject phase context into a log record.

        Returns:
            Always True (does not filter, only enriches).
        """
        path = current_log_context()
        record.phase_path = list(path) if path else None
        record.phase_tag = f"[{': '.join(path)}] " if path else ""
        return True
