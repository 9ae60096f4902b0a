"""Action plans: building, translation and execution.

Typical use:

    session = build_plan(configure, Session(), phase="configure")
    plan, session = translate(session.action_plan, session)
    results, session = execute(plan, session, ImplementationExecutor())
"""

from pallet.plan.api import (
    begin_scope,
    build_plan,
    end_scope,
    plan_fn,
    plan_when,
    schedule_action,
)
from pallet.plan.arguments import DelayedArgument, delayed, evaluate
from pallet.plan.builder import ActionPlan, action_map
from pallet.plan.execute import (
    Executor,
    StatusFn,
    continue_on_error,
    execute,
    execute_action_map,
    execute_if,
    stop_execution_on_error,
)
from pallet.plan.node_values import NodeValue
from pallet.plan.results import ActionError, StepResult, first_error
from pallet.plan.translate import is_translated, translate
from pallet.plan.types import ActionMap, ActionSequence

__all__ = [
    "ActionError",
    "ActionMap",
    "ActionPlan",
    "ActionSequence",
    "DelayedArgument",
    "Executor",
    "NodeValue",
    "StatusFn",
    "StepResult",
    "action_map",
    "begin_scope",
    "build_plan",
    "continue_on_error",
    "delayed",
    "end_scope",
    "evaluate",
    "execute",
    "execute_action_map",
    "execute_if",
    "first_error",
    "is_translated",
    "plan_fn",
    "plan_when",
    "schedule_action",
    "stop_execution_on_error",
    "translate",
]
