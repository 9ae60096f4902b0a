"""Scheduling surface for phase functions.

Phase functions build plans by calling actions; the calls land here and
are recorded in the ambient session's plan (see pallet.session).
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pallet.context import phase_context
from pallet.exceptions import PlanStructureError
from pallet.plan.builder import ActionPlan
from pallet.session import Session, current_session, session_scope, update_session

if TYPE_CHECKING:
    from pallet.actions.types import Action
    from pallet.plan.node_values import NodeValue

logger = logging.getLogger(__name__)


def _current_plan() -> tuple[Session, ActionPlan]:
    session = current_session()
    return session, session.action_plan or ActionPlan()


def schedule_action(
    action: Action,
    args: Sequence[Any] = (),
    options: Mapping[str, Any] | None = None,
) -> NodeValue:
    """Schedule an action instance into the ambient session's plan.

    Returns:
        Node value handle for the action's result.
    """
    session, plan = _current_plan()
    handle, plan = plan.schedule(action, args, options)
    update_session(session.with_action_plan(plan))
    return handle


def begin_scope() -> None:
    """Open a nested scope in the ambient plan."""
    session, plan = _current_plan()
    update_session(session.with_action_plan(plan.begin_scope()))


def end_scope() -> None:
    """Close the innermost nested scope of the ambient plan.

    Raises:
        PlanStructureError: If no nested scope is open.
    """
    session, plan = _current_plan()
    if plan.depth == 1:
        raise PlanStructureError("end_scope() called with no nested scope open")
    update_session(session.with_action_plan(plan.end_scope()))


def _scoped(fn: Callable[[], Any]) -> None:
    begin_scope()
    fn()
    end_scope()


def plan_when(
    condition: Any,
    then_fn: Callable[[], Any],
    else_fn: Callable[[], Any] | None = None,
) -> NodeValue:
    """Schedule a conditional: actions from ``then_fn`` run if ``condition`` holds.

    ``condition`` is evaluated at execution time, so it may be a node value
    or delayed argument. ``then_fn`` and ``else_fn`` are called now and
    schedule the actions of each branch.
    """
    from pallet.actions.flow import if_action

    handle = schedule_action(if_action, (condition,))
    _scoped(then_fn)
    if else_fn is not None:
        _scoped(else_fn)
    return handle


def plan_fn(
    f: Callable[..., Any] | None = None, *, label: str | None = None
) -> Any:
    """Decorator running a function under its own phase context label.

    Example:
        @plan_fn
        def nginx():
            package("nginx")
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        name = label or fn.__name__

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with phase_context(name):
                return fn(*args, **kwargs)

        return wrapper

    if f is not None:
        return decorator(f)
    return decorator


def build_plan(
    phase_fn: Callable[..., Any],
    session: Session | None = None,
    *args: Any,
    phase: str | None = None,
) -> Session:
    """Run a phase function and return the session holding the built plan.

    Args:
        phase_fn: Function scheduling actions.
        session: Session to build into (a new one if None).
        *args: Arguments for ``phase_fn``.
        phase: Optional phase name pushed onto the phase context.

    Returns:
        Session whose ``action_plan`` holds the untranslated plan.
    """
    session = session or Session()
    if session.action_plan is None:
        session = session.with_action_plan(ActionPlan())

    with session_scope(session):
        if phase is not None:
            with phase_context(phase):
                phase_fn(*args)
        else:
            phase_fn(*args)
        session = current_session()

    logger.debug(
        "Built plan with %d action(s)%s",
        len(session.action_plan),
        f" for phase {phase}" if phase else "",
    )
    return session
