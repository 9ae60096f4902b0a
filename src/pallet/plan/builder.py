"""Action plan builder.

While phase functions run, scheduled actions are appended to an ActionPlan:
a stack of open scopes. Opening a scope (for the branches of a
conditional) pushes an empty scope; closing it attaches its actions as a
block of the most recently scheduled action in the enclosing scope.
Closing the outermost scope yields the flat, untranslated root sequence.

ActionPlan is immutable: every operation returns a new plan.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from pallet.context import phase_contexts
from pallet.exceptions import PlanStructureError
from pallet.plan.node_values import NodeValue, node_value_path_for
from pallet.plan.types import (
    PRECEDENCE_OPTIONS,
    ActionMap,
    ActionSequence,
    as_targets,
)

if TYPE_CHECKING:
    from pallet.actions.types import Action

logger = logging.getLogger(__name__)

_action_id_counter = itertools.count(1)


def generate_action_id() -> str:
    """Return a fresh, process-unique action-id."""
    return f"action-id{next(_action_id_counter)}"


def action_map(
    action: Action,
    args: Sequence[Any],
    options: Mapping[str, Any] | None = None,
) -> ActionMap:
    """Return an action map (an instance) for ``action`` and ``args``.

    If ``options`` sets any of action_id, always_before or always_after, an
    action-id is generated when none is given. The id keeps the instance
    from merging with other instances of the same action, so declaring
    precedence never changes how unrelated instances are grouped.

    Options other than the precedence options are kept on the action map
    for executors (e.g. ``sudo_user``).

    Args:
        action: The action being scheduled.
        args: Arguments for the action implementation.
        options: Schedule options.

    Returns:
        A new ActionMap without a node-value path.
    """
    options = dict(options or {})
    precedence = {k: options.pop(k) for k in list(options) if k in PRECEDENCE_OPTIONS}
    if precedence and precedence.get("action_id") is None:
        precedence["action_id"] = generate_action_id()

    merged = {**action.precedence(), **precedence}
    path = phase_contexts()
    if action.execution.is_deferred:
        # The deepest label is supplied again when the action is expanded.
        path = path[:-1]

    return ActionMap(
        action=action,
        args=tuple(args),
        context=path,
        action_id=merged.get("action_id"),
        always_before=as_targets(merged.get("always_before")),
        always_after=as_targets(merged.get("always_after")),
        options=options,
    )


@dataclass(frozen=True)
class ActionPlan:
    """An untranslated action plan: a stack of open scopes.

    ``scopes[0]`` is the root scope and ``scopes[-1]`` the scope new actions
    are appended to. Each scope holds its actions in scheduling order.
    """

    scopes: tuple[ActionSequence, ...] = ((),)

    @property
    def depth(self) -> int:
        """Number of open scopes, including the root scope."""
        return len(self.scopes)

    def __len__(self) -> int:
        return sum(len(scope) for scope in self.scopes)

    def add_action_map(self, action_map: ActionMap) -> ActionPlan:
        """Append an action map to the current scope."""
        current = self.scopes[-1]
        return replace(self, scopes=(*self.scopes[:-1], (*current, action_map)))

    def schedule(
        self,
        action: Action,
        args: Sequence[Any] = (),
        options: Mapping[str, Any] | None = None,
    ) -> tuple[NodeValue, ActionPlan]:
        """Schedule an instance of ``action`` in the current scope.

        Returns:
            Tuple of (node value handle, updated plan). The handle can be
            passed as an argument to actions scheduled later.
        """
        instance = action_map(action, args, options)
        path = node_value_path_for(self, instance)
        instance = replace(instance, node_value_path=path)
        logger.debug(
            "schedule %s %s (%s)",
            action.name,
            path,
            ": ".join(instance.context) or "-",
        )
        return NodeValue(path), self.add_action_map(instance)

    def begin_scope(self) -> ActionPlan:
        """Open a nested scope.

        The scope's actions become a block of the action most recently
        scheduled in the enclosing scope when the scope is closed.
        """
        return replace(self, scopes=(*self.scopes, ()))

    def end_scope(self) -> ActionPlan | ActionSequence:
        """Close the current scope.

        Returns:
            The updated plan for a nested scope, or the flat root sequence
            when the root scope is closed.

        Raises:
            PlanStructureError: If the enclosing scope has no action to
                attach the closed scope to.
        """
        if self.depth == 1:
            return self.close()

        block = self.scopes[-1]
        parent = self.scopes[-2]
        if not parent:
            raise PlanStructureError(
                "Cannot close scope: no action scheduled before it was opened"
            )
        owner = parent[-1]
        owner = replace(owner, blocks=(*(owner.blocks or ()), block))
        return replace(self, scopes=(*self.scopes[:-2], (*parent[:-1], owner)))

    def close(self) -> ActionSequence:
        """Close the root scope and return the flat root sequence.

        Raises:
            PlanStructureError: If a nested scope is still open.
        """
        if self.depth != 1:
            raise PlanStructureError(
                f"Cannot close action plan with {self.depth - 1} nested "
                "scope(s) still open"
            )
        return self.scopes[0]
