"""Deferred action expansion.

A deferred action stands for more actions that can only be generated once
the whole plan is known. At translation time its default implementation
(a phase function) is called with its stored arguments, inside a fresh
scope of the live session's plan and with its recorded phase context
re-bound. Whatever that call schedules replaces the deferred instance,
in place.

Faults raised by the phase function are not caught: translation aborts
with the original exception.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from pallet.actions.types import DEFAULT_IMPLEMENTATION
from pallet.context import in_phase_context_scope
from pallet.exceptions import PlanStructureError
from pallet.plan.builder import ActionPlan
from pallet.plan.executions import transform_executions
from pallet.plan.types import ActionMap, ActionSequence
from pallet.session import current_session, session_scope

if TYPE_CHECKING:
    from pallet.session import Session

logger = logging.getLogger(__name__)


def execute_deferred_action(
    action_map: ActionMap, session: Session
) -> tuple[ActionSequence, Session]:
    """Expand one deferred instance into the sub-plan it generates.

    Args:
        action_map: A deferred instance.
        session: The live session the phase function schedules into.

    Returns:
        Tuple of (generated sub-plan, session after the call). The
        session's plan slot is left as it was before the call.
    """
    base_plan = session.action_plan or ActionPlan()
    f = action_map.action.implementation(DEFAULT_IMPLEMENTATION).f
    logger.debug(
        "Expanding deferred action %s (%s)",
        action_map.action.name,
        ": ".join(action_map.context) or "-",
    )

    with session_scope(session.with_action_plan(base_plan.begin_scope())):
        if action_map.context:
            with in_phase_context_scope(action_map.context):
                f(*action_map.args)
        else:
            f(*action_map.args)
        session = current_session()

    plan = session.action_plan
    if plan is None or plan.depth != base_plan.depth + 1:
        raise PlanStructureError(
            f"Deferred action '{action_map.action.name}' left its scope unbalanced"
        )
    sub_plan = transform_executions(plan.scopes[-1])
    logger.debug("Local action plan is %s", [a.action.name for a in sub_plan])
    return sub_plan, session.with_action_plan(base_plan)


def execute_deferred_actions(
    plan: ActionSequence, session: Session
) -> tuple[ActionSequence, Session]:
    """Replace every deferred instance in a plan with its generated sub-plan.

    Generated actions may themselves be deferred; expansion repeats until
    none remain. Nested blocks are expanded independently.

    Returns:
        Tuple of (expanded plan, session).
    """
    expanded: list[ActionMap] = []
    for action_map in plan:
        if action_map.execution.is_deferred:
            sub_plan, session = execute_deferred_action(action_map, session)
            sub_plan, session = execute_deferred_actions(sub_plan, session)
            expanded.extend(sub_plan)
            continue
        if action_map.blocks is not None:
            blocks = []
            for block in action_map.blocks:
                block, session = execute_deferred_actions(block, session)
                blocks.append(block)
            action_map = replace(action_map, blocks=tuple(blocks))
        expanded.append(action_map)
    return tuple(expanded), session
