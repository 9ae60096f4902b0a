"""Session state threaded through planning and execution.

A Session is an immutable value: every operation returns a new Session.
The executor core folds a session through the actions of a plan, and the
builder keeps the in-progress action plan in the session's plan slot.

Phase functions do not receive the session explicitly; they schedule
actions against the ambient session installed by ``session_scope``.
"""

from __future__ import annotations

import contextvars
from collections.abc import Callable, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from pallet.exceptions import NodeValueError, NoSessionError

if TYPE_CHECKING:
    from collections.abc import Generator

    from pallet.plan.builder import ActionPlan


@dataclass(frozen=True)
class Session:
    """State owned by one planning and execution run."""

    action_plan: ActionPlan | None = None
    """In-progress (untranslated) action plan, if one is being built."""

    node_values: Mapping[str, Any] = field(default_factory=dict)
    """Values of executed actions, keyed by node-value path."""

    executor: Callable[..., Any] | None = None
    """Executor of the run in progress (set by execute)."""

    status_fn: Callable[..., Any] | None = None
    """Status function of the run in progress (set by execute)."""

    data: Mapping[str, Any] = field(default_factory=dict)
    """Caller-owned values (target node, user, settings...)."""

    def get_action_plan(self) -> ActionPlan | None:
        """Return the in-progress action plan."""
        return self.action_plan

    def with_action_plan(self, plan: ActionPlan | None) -> Session:
        """Return a session holding ``plan`` as its in-progress plan."""
        return replace(self, action_plan=plan)

    def without_action_plan(self) -> Session:
        """Return a session with the in-progress plan slot cleared."""
        return replace(self, action_plan=None)

    def has_node_value(self, path: str) -> bool:
        """True if a value has been stored at ``path``."""
        return path in self.node_values

    def get_node_value(self, path: str) -> Any:
        """Return the value stored at a node-value path.

        Raises:
            NodeValueError: If the action owning the path has not run.
        """
        try:
            return self.node_values[path]
        except KeyError:
            raise NodeValueError(path) from None

    def set_node_value(self, value: Any, path: str) -> Session:
        """Return a session with ``value`` stored at ``path``."""
        return replace(self, node_values={**self.node_values, path: value})

    def with_data(self, **values: Any) -> Session:
        """Return a session with caller data updated."""
        return replace(self, data={**self.data, **values})


_current_session: contextvars.ContextVar[Session | None] = contextvars.ContextVar(
    "current_session", default=None
)


@contextmanager
def session_scope(session: Session) -> Generator[None, None, None]:
    """Install ``session`` as the ambient session for the block.

    Code inside the block reads it with ``current_session()`` and replaces
    it with ``update_session()``; the caller reads the final session
    before leaving the block.

    Example:
        with session_scope(session):
            phase_fn()
            session = current_session()
    """
    token = _current_session.set(session)
    try:
        yield
    finally:
        _current_session.reset(token)


def current_session() -> Session:
    """Return the ambient session.

    Raises:
        NoSessionError: If called outside session_scope().
    """
    session = _current_session.get()
    if session is None:
        raise NoSessionError()
    return session


def update_session(session: Session) -> None:
    """Replace the ambient session.

    Raises:
        NoSessionError: If called outside session_scope().
    """
    if _current_session.get() is None:
        raise NoSessionError()
    _current_session.set(session)
