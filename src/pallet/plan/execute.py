"""Execute a translated action plan.

Execution is a left-to-right fold over the plan, threading the session:
each action map's arguments are evaluated, the executor is called, and the
return value is stored under the action's node-value path. A status
function inspects every result and may stop the run; once stopped, all
remaining actions, including those of enclosing folds, are skipped.

A fault raised by one action is caught at that action's boundary and
becomes an error result paired with the session as it was before the
action. The default status function stops on the first such error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any

from pallet.context import context_label, defining_context
from pallet.exceptions import PalletError, UntranslatedPlanError
from pallet.plan.arguments import evaluate_arguments
from pallet.plan.builder import ActionPlan
from pallet.plan.node_values import set_node_value
from pallet.plan.results import ActionError, StepResult
from pallet.plan.translate import is_translated
from pallet.plan.types import ActionMap
from pallet.session import Session

logger = logging.getLogger(__name__)

Executor = Callable[[Session, ActionMap], tuple[Any, Session]]
"""Runs one action map (with evaluated args) and returns (value, session)."""

StatusFn = Callable[[StepResult, Session], tuple[StepResult, Session]]
"""Decides whether execution continues after each action."""


# =============================================================================
# Status Functions
# =============================================================================


def stop_execution_on_error(
    result: StepResult, session: Session
) -> tuple[StepResult, Session]:
    """Status function that stops the run on the first error."""
    if result.stopped or result.error is None:
        return result, session
    logger.error(
        "Stopping execution: %s%s",
        f"{' '.join(result.error.context)}: " if result.error.context else "",
        result.error.message,
    )
    return replace(result, stopped=True), session


def continue_on_error(
    result: StepResult, session: Session
) -> tuple[StepResult, Session]:
    """Status function that logs errors and keeps going."""
    if result.error is not None and not result.stopped:
        logger.warning(
            "Action %s failed, continuing: %s", result.action, result.error.message
        )
    return result, session


# =============================================================================
# Action Map Execution
# =============================================================================


def execute_action_map(
    executor: Executor, session: Session, action_map: ActionMap
) -> tuple[StepResult, Session]:
    """Execute a single action map, converting any exception into an error result.

    Args:
        executor: Executor selecting and calling the implementation.
        session: Session before the action.
        action_map: The action map to run.

    Returns:
        Tuple of (result, session). On error, the session is the one passed
        in, unmodified by the failing action.
    """
    result, session, _ = _run_action_map(executor, session, action_map)
    return result, session


def _run_action_map(
    executor: Executor, session: Session, action_map: ActionMap
) -> tuple[StepResult, Session, bool]:
    """Run one action map; the flag is True for a conditional's branch result.

    A branch result was already passed through the status function by the
    nested fold, so the caller must not pass it through again.
    """
    name = action_map.action.name
    logger.debug(
        "execute-action-map %s %s", describe(action_map), action_map.node_value_path
    )
    try:
        with defining_context(action_map.context):
            args = evaluate_arguments(session, action_map)
            value, new_session = executor(session, replace(action_map, args=args))
    except Exception as e:
        logger.debug("Exception in execute-action-map %s", name, exc_info=True)
        error = ActionError(
            message=f"Unexpected exception: {e}",
            context=tuple(action_map.context),
            cause=e,
        )
        return StepResult(error=error, action=name), session, False

    nested = isinstance(value, StepResult)
    if nested:
        # Reported as the conditional; error and stop flag are kept.
        result = replace(value, action=name)
    else:
        result = StepResult(value=value, action=name)
    logger.debug("rv is %r", result.value)
    session = set_node_value(new_session, result.value, action_map.node_value_path)
    return result, session, nested


def _execute_actions(
    actions: Sequence[ActionMap],
    session: Session,
    executor: Executor,
    status_fn: StatusFn,
) -> tuple[list[StepResult], Session]:
    results: list[StepResult] = []
    for action_map in actions:
        result, session, nested = _run_action_map(executor, session, action_map)
        if not nested:
            result, session = status_fn(result, session)
        results.append(result)
        if result.stopped:
            break
    return results, session


def execute_if(
    session: Session, action_map: ActionMap, value: Any
) -> tuple[StepResult | None, Session]:
    """Execute the then or else block of a conditional action.

    Must be called from an implementation running under ``execute``: the
    branch is run with the same executor and status function as the
    enclosing run, so a stop inside the branch stops the enclosing run too.

    Args:
        session: Current session.
        action_map: The conditional's action map, carrying its blocks.
        value: The evaluated condition.

    Returns:
        Tuple of (last result of the branch, or None, session).
    """
    executor = session.executor
    status_fn = session.status_fn
    if executor is None or status_fn is None:
        raise PalletError("execute_if called outside of execute()")

    blocks = action_map.blocks or ()
    logger.debug("execute-if value %r", value)
    if value:
        branch = blocks[0] if blocks else ()
    elif len(blocks) > 1 and blocks[1]:
        branch = blocks[1]
    else:
        return None, session

    results, session = _execute_actions(branch, session, executor, status_fn)
    return (results[-1] if results else None), session


# =============================================================================
# Action Plan Execution
# =============================================================================


def execute(
    plan: Sequence[ActionMap] | ActionPlan,
    session: Session,
    executor: Executor,
    status_fn: StatusFn = stop_execution_on_error,
) -> tuple[list[StepResult], Session]:
    """Execute a translated action plan.

    Args:
        plan: A translated plan.
        session: Initial session.
        executor: Executor selecting and calling implementations.
        status_fn: Status function deciding whether to continue after
            each action.

    Returns:
        Tuple of (results, final session). If the run stopped early, the
        last result is the one that stopped it.

    Raises:
        UntranslatedPlanError: If ``plan`` is still in builder shape.
    """
    if not is_translated(plan):
        raise UntranslatedPlanError()

    logger.debug("execute %d actions", len(plan))
    # Conditional actions read these back from the session.
    run_session = replace(session, executor=executor, status_fn=status_fn)
    results, run_session = _execute_actions(plan, run_session, executor, status_fn)
    session = replace(
        run_session, executor=session.executor, status_fn=session.status_fn
    )

    failed = sum(1 for r in results if r.failed)
    if results and results[-1].stopped:
        logger.info(
            "Execution stopped after %d of %d action(s)", len(results), len(plan)
        )
    else:
        logger.info("Executed %d action(s), %d failed", len(results), failed)
    return results, session


def describe(action_map: ActionMap) -> str:
    """Return ``name`` or ``label name`` for log and CLI output."""
    label = context_label(action_map)
    return f"{label} {action_map.action.name}" if label else action_map.action.name
