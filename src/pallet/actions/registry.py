"""Action registry.

The registry tracks defined actions by name so that plans, executors and
the CLI can look them up. Actions themselves are compared by identity,
the registry only provides naming.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pallet.actions.types import (
    DEFAULT_IMPLEMENTATION,
    Action,
    ActionImplementation,
    ExecutionKind,
)

logger = logging.getLogger(__name__)


class ActionRegistry:
    """Central registry of defined actions."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}

    def register(self, action: Action) -> Action:
        """Register an action.

        A second action with an already registered name is skipped with a
        warning; the first registration wins.

        Args:
            action: Action to register.

        Returns:
            The registered action (the existing one for a duplicate name).
        """
        existing = self._actions.get(action.name)
        if existing is not None:
            if existing is not action:
                logger.warning(
                    "Action '%s' already registered (%s). Skipping duplicate (%s).",
                    action.name,
                    existing.execution.value,
                    action.execution.value,
                )
            return existing

        self._actions[action.name] = action
        logger.debug(
            "Registered action: %s (%s)", action.name, action.execution.value
        )
        return action

    def unregister(self, name: str) -> bool:
        """Unregister an action by name.

        Returns:
            True if an action was removed.
        """
        return self._actions.pop(name, None) is not None

    def get(self, name: str) -> Action | None:
        """Get an action by name."""
        return self._actions.get(name)

    def get_by_execution(self, execution: ExecutionKind) -> list[Action]:
        """Get all actions with the given execution kind."""
        return [a for a in self._actions.values() if a.execution is execution]

    def list_names(self) -> list[str]:
        """Return registered action names in registration order."""
        return list(self._actions)

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def __len__(self) -> int:
        return len(self._actions)

    def clear(self) -> None:
        """Remove all registered actions."""
        self._actions.clear()


_default_registry = ActionRegistry()


def get_registry() -> ActionRegistry:
    """Return the process-wide default registry."""
    return _default_registry


def define_action(
    name: str | None = None,
    *,
    execution: ExecutionKind = ExecutionKind.IN_SEQUENCE,
    always_before: Any = None,
    always_after: Any = None,
    flow: bool = False,
    registry: ActionRegistry | None = None,
) -> Callable[[Callable[..., Any]], Action]:
    """Decorator defining an action whose default implementation is the function.

    For regular kinds the function is called ``f(session, *args)`` and
    returns ``(value, session)``. For deferred kinds it is a phase function
    called ``f(*args)`` at translation time, which schedules further
    actions.

    Args:
        name: Action name; defaults to the function name.
        execution: Execution kind for every instance of the action.
        always_before: Default always-before constraints.
        always_after: Default always-after constraints.
        flow: True if the implementation receives the action map.
        registry: Registry to add the action to (default registry if None).

    Returns:
        Decorator producing the registered Action.

    Example:
        @define_action(execution=ExecutionKind.AGGREGATED)
        def packages(session, *arg_tuples):
            names = [name for (name,) in arg_tuples]
            return names, session
    """

    def decorator(f: Callable[..., Any]) -> Action:
        action = Action(
            name=name or f.__name__,
            execution=execution,
            implementations={
                DEFAULT_IMPLEMENTATION: ActionImplementation(f=f, flow=flow)
            },
            always_before=always_before,
            always_after=always_after,
        )
        return (registry or _default_registry).register(action)

    return decorator
