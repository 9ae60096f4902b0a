"""Node values: handles to results of actions that have not run yet.

A node value is minted when an action is scheduled and can be passed as an
argument to actions scheduled later. The executor core stores each
action's return value under its node-value path, and argument evaluation
resolves the handle when the dependent action runs.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pallet.plan.types import ActionMap, iter_plan

if TYPE_CHECKING:
    from pallet.plan.builder import ActionPlan
    from pallet.session import Session

logger = logging.getLogger(__name__)

_path_counter = itertools.count(1)


@dataclass(frozen=True)
class NodeValue:
    """Opaque handle to the not-yet-computed result of an action."""

    path: str

    def get(self, session: Session) -> Any:
        """Return the stored value.

        Raises:
            NodeValueError: If the owning action has not run yet.
        """
        return session.get_node_value(self.path)

    def __repr__(self) -> str:
        return f"NodeValue({self.path})"


def new_node_value_path() -> str:
    """Mint a fresh, process-unique node-value path."""
    return f"nv{next(_path_counter)}"


def find_node_value_path(plan: ActionPlan | None, action_map: ActionMap) -> str | None:
    """Find the node-value path of an earlier instance of the same action.

    Any earlier instance of the same action supplies the path, whatever its
    action-id, so every aggregated or collected call of one action shares a
    single handle. Every open scope and every closed block is searched.
    """
    if plan is None:
        return None
    for scope in plan.scopes:
        for existing in iter_plan(scope):
            if existing.action is action_map.action:
                return existing.node_value_path
    return None


def node_value_path_for(plan: ActionPlan | None, action_map: ActionMap) -> str:
    """Return the node-value path to assign to a newly scheduled instance.

    Merged kinds reuse the path of a matching instance already in the plan;
    every other kind, including the deferred kinds, gets a fresh path.
    """
    if action_map.execution.is_merged:
        existing = find_node_value_path(plan, action_map)
        if existing is not None:
            logger.debug(
                "Reusing node value %s for %s", existing, action_map.action.name
            )
            return existing
    return new_node_value_path()


def set_node_value(session: Session, value: Any, path: str | None) -> Session:
    """Store an action's return value, if the action has a path."""
    if path is None:
        return session
    logger.debug("set-node-value %s %r", path, value)
    return session.set_node_value(value, path)
