"""Translate a built action plan into an executable plan.

Translation closes the root scope, then runs three passes in order:

1. execution-kind sorting and merging (executions.py)
2. deferred action expansion against the session (deferred.py)
3. precedence enforcement (precedence.py)

The result is a tuple of action maps ready for the executor core.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from pallet.exceptions import PlanStructureError
from pallet.plan.builder import ActionPlan
from pallet.plan.deferred import execute_deferred_actions
from pallet.plan.executions import transform_executions
from pallet.plan.precedence import enforce_precedence
from pallet.plan.types import ActionMap, ActionSequence

if TYPE_CHECKING:
    from pallet.session import Session

logger = logging.getLogger(__name__)


def is_translated(plan: ActionPlan | Sequence[ActionMap]) -> bool:
    """True if ``plan`` is no longer in builder shape.

    Raises:
        PlanStructureError: If ``plan`` is not an action plan at all.
    """
    if isinstance(plan, ActionPlan):
        return False
    if isinstance(plan, Sequence) and not isinstance(plan, (str, bytes)):
        return True
    raise PlanStructureError(f"Not an action plan: {plan!r}")


def translate(
    plan: ActionPlan | Sequence[ActionMap], session: Session
) -> tuple[ActionSequence, Session]:
    """Translate a plan, applying grouping, deferred expansion and precedence.

    Translating an already translated plan returns it unchanged.

    Args:
        plan: The built plan (normally ``session.action_plan``).
        session: Session deferred actions are expanded against.

    Returns:
        Tuple of (translated plan, session with its plan slot cleared).

    Raises:
        PlanStructureError: If nested scopes are still open.
        Exception: Any fault raised while expanding a deferred action.
    """
    if is_translated(plan):
        logger.debug("translate: plan already translated (%d actions)", len(plan))
        return tuple(plan), session.without_action_plan()

    logger.debug("translate %d actions", len(plan))
    actions = plan.close()
    actions = transform_executions(actions)
    actions, session = execute_deferred_actions(actions, session)
    actions = enforce_precedence(actions)
    return actions, session.without_action_plan()
