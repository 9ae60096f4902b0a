"""pallet: plan and execute infrastructure actions.

Phase functions schedule actions into an action plan; the plan is
translated (grouped, expanded and ordered) and then executed against a
pluggable executor.
"""

from pallet.actions import Action, ExecutionKind, define_action
from pallet.actions.flow import if_action
from pallet.context import phase_context, phase_contexts
from pallet.exceptions import (
    PalletError,
    PlanStructureError,
    UntranslatedPlanError,
)
from pallet.executors import DryRunExecutor, ImplementationExecutor
from pallet.plan import (
    NodeValue,
    StepResult,
    build_plan,
    execute,
    plan_fn,
    plan_when,
    stop_execution_on_error,
    translate,
)
from pallet.session import Session

__version__ = "0.1.0"

__all__ = [
    "Action",
    "DryRunExecutor",
    "ExecutionKind",
    "ImplementationExecutor",
    "NodeValue",
    "PalletError",
    "PlanStructureError",
    "Session",
    "StepResult",
    "UntranslatedPlanError",
    "build_plan",
    "define_action",
    "execute",
    "if_action",
    "phase_context",
    "phase_contexts",
    "plan_fn",
    "plan_when",
    "stop_execution_on_error",
    "translate",
]
