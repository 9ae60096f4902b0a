"""Stock executors.

An executor is called with the session and an action map whose arguments
have been evaluated, and returns ``(value, session)``. It alone decides
which named implementation of the action runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pallet.actions.types import DEFAULT_IMPLEMENTATION, ActionImplementation
from pallet.context import context_label
from pallet.exceptions import ActionImplementationError
from pallet.plan.execute import execute_if
from pallet.plan.types import ActionMap
from pallet.session import Session

logger = logging.getLogger(__name__)


def select_implementation(
    action_map: ActionMap, name: str = DEFAULT_IMPLEMENTATION
) -> ActionImplementation:
    """Select a named implementation, falling back to the default one.

    Raises:
        ActionImplementationError: If neither implementation exists.
    """
    implementations = action_map.action.implementations
    implementation = implementations.get(name) or implementations.get(
        DEFAULT_IMPLEMENTATION
    )
    if implementation is None:
        raise ActionImplementationError(action_map.action.name, name)
    return implementation


class ImplementationExecutor:
    """Executor calling one named implementation of each action.

    Args:
        implementation: Name of the implementation to prefer.
    """

    def __init__(self, implementation: str = DEFAULT_IMPLEMENTATION) -> None:
        self.implementation = implementation

    def __call__(self, session: Session, action_map: ActionMap) -> tuple[Any, Session]:
        impl = select_implementation(action_map, self.implementation)
        logger.debug(
            "Executing %s with %s implementation",
            action_map.action.name,
            self.implementation,
        )
        if impl.flow:
            return impl.f(session, action_map, *action_map.args)
        return impl.f(session, *action_map.args)


@dataclass
class DryRunRecord:
    """One action seen by the dry-run executor."""

    action: str
    args: tuple[Any, ...]
    label: str | None


@dataclass
class DryRunExecutor:
    """Executor that records actions instead of running them.

    Conditionals are followed into their then-branch so every reachable
    action is recorded.
    """

    records: list[DryRunRecord] = field(default_factory=list)

    def __call__(self, session: Session, action_map: ActionMap) -> tuple[Any, Session]:
        self.records.append(
            DryRunRecord(
                action=action_map.action.name,
                args=action_map.args,
                label=context_label(action_map),
            )
        )
        if action_map.blocks:
            return execute_if(session, action_map, True)
        return None, session
