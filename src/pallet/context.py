"""Phase context tracking.

The phase context is the nested path of labels built up while phase
functions run (for example ``("configure", "nginx")``). It is recorded on
every scheduled action map so that, at execution time, logs and generated
scripts can say where an action was declared.

Both the current phase path and the defining context of the action being
executed are held in contextvars, so nested scopes restore correctly and
nothing leaks between threads.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterable
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

    from pallet.plan.types import ActionMap

_phase_contexts: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "phase_contexts", default=()
)
_defining_context: contextvars.ContextVar[tuple[str, ...] | None] = (
    contextvars.ContextVar("defining_context", default=None)
)


def phase_contexts() -> tuple[str, ...]:
    """Return the current phase context path."""
    return _phase_contexts.get()


@contextmanager
def phase_context(label: str) -> Generator[tuple[str, ...], None, None]:
    """Push a label onto the phase context for the duration of the block.

    Args:
        label: Human-readable label, e.g. a phase or crate function name.

    Yields:
        The phase context path including the new label.

    Example:
        with phase_context("configure"):
            with phase_context("nginx"):
                phase_contexts()  # ("configure", "nginx")
    """
    path = (*_phase_contexts.get(), label)
    token = _phase_contexts.set(path)
    try:
        yield path
    finally:
        _phase_contexts.reset(token)


@contextmanager
def in_phase_context_scope(
    path: Iterable[str],
) -> Generator[tuple[str, ...], None, None]:
    """Replace the whole phase context path for the duration of the block.

    Used to re-establish a context recorded earlier, e.g. when a deferred
    action is expanded at translation time.

    Args:
        path: The phase context path to bind.

    Yields:
        The bound path.
    """
    bound = tuple(path)
    token = _phase_contexts.set(bound)
    try:
        yield bound
    finally:
        _phase_contexts.reset(token)


@contextmanager
def defining_context(
    path: Iterable[str] | None,
) -> Generator[None, None, None]:
    """Bind the context an action was declared in while it executes.

    Args:
        path: Recorded context of the action map being executed.
    """
    token = _defining_context.set(tuple(path) if path is not None else None)
    try:
        yield
    finally:
        _defining_context.reset(token)


def get_defining_context() -> tuple[str, ...] | None:
    """Return the defining context of the executing action, if any."""
    return _defining_context.get()


def context_string(path: Iterable[str] | None) -> str | None:
    """Render a context path as a prefix for in-sequence actions.

    ``("configure", "nginx")`` renders as ``"configure: nginx: "``.
    Returns None for an empty path.
    """
    parts = [str(p) for p in path or ()]
    if not parts:
        return None
    return ": ".join(parts) + ": "


def multi_context_string(path: Iterable[str] | None) -> str | None:
    """Render a context path as a label for aggregated actions.

    ``("configure", "nginx")`` renders as ``"[configure: nginx]"``.
    Returns None for an empty path.
    """
    parts = [str(p) for p in path or ()]
    if not parts:
        return None
    return "[" + ": ".join(parts) + "]"


def defining_context_string() -> str:
    """Return the defining context as a prefix, or "" outside execution."""
    return context_string(_defining_context.get()) or ""


def context_label(action_map: ActionMap) -> str | None:
    """Return a diagnostic label for an action map.

    Aggregated and collected actions carry labels already merged from
    several instances, so they are joined as-is; other actions render
    their recorded path.
    """
    if action_map.action.execution.base.is_merged:
        labels = [c for c in action_map.context if c]
        if not labels:
            return None
        if all(c.startswith("[") for c in labels):
            return " ".join(labels)
        return multi_context_string(labels)
    label = context_string(action_map.context)
    return label.strip() if label else None
