"""Result types for action plan execution."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

ACTION_EXECUTION_ERROR = "action-execution-error"
"""Error kind for faults raised while running a single action."""


@dataclass(frozen=True)
class ActionError:
    """Structured description of a fault raised by one action."""

    message: str
    """Human-readable description of the fault."""

    context: tuple[str, ...] = ()
    """Phase context the failing action was declared in."""

    kind: str = ACTION_EXECUTION_ERROR
    """Error category."""

    cause: BaseException | None = None
    """The original exception."""


@dataclass(frozen=True)
class StepResult:
    """Outcome of running one action map."""

    value: Any = None
    """Value returned by the action (None on error)."""

    error: ActionError | None = None
    """Set when the action raised instead of returning."""

    stopped: bool = False
    """Set by a status function to skip every remaining action."""

    action: str | None = None
    """Name of the action that produced the result."""

    @property
    def failed(self) -> bool:
        """True if the action raised."""
        return self.error is not None


def first_error(results: Iterable[StepResult]) -> ActionError | None:
    """Return the first error in a list of results, or None."""
    for result in results:
        if result.error is not None:
            return result.error
    return None
