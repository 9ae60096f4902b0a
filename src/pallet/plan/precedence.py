"""Enforce declared precedence between actions.

Instances may declare ``always_before`` and ``always_after`` targets. A
target is either an action (matching every instance of it in the scope)
or an action-id string (matching the instance with that id). Constraints
only apply within one scope; a target absent from the scope is ignored.

Each scope is reordered with a depth-first emission over the "required
before" relation, starting from instances in their current order. Cyclic
declarations cannot be satisfied: the first-discovered order is kept and
a warning is logged.
"""

from __future__ import annotations

import logging

from pallet.plan.types import (
    ActionMap,
    ActionSequence,
    PrecedenceTarget,
    walk_plan,
)

logger = logging.getLogger(__name__)


def _action_id_index(scope: ActionSequence) -> dict[str, list[int]]:
    """Map each action-id in the scope to the positions of its instances."""
    ids: dict[str, list[int]] = {}
    for index, action_map in enumerate(scope):
        if action_map.action_id is not None:
            ids.setdefault(action_map.action_id, []).append(index)
    return ids


def _resolve_target(
    target: PrecedenceTarget,
    scope: ActionSequence,
    ids: dict[str, list[int]],
) -> list[int]:
    if isinstance(target, str):
        return ids.get(target, [])
    return [i for i, action_map in enumerate(scope) if action_map.action is target]


def scope_dependencies(scope: ActionSequence) -> dict[int, list[int]]:
    """Build the "required before" relation for one scope.

    Returns:
        Mapping from each position to the positions that must be emitted
        before it, in ascending order.
    """
    ids = _action_id_index(scope)
    required: dict[int, set[int]] = {i: set() for i in range(len(scope))}
    for source, action_map in enumerate(scope):
        for target in action_map.always_before:
            for index in _resolve_target(target, scope, ids):
                if index != source:
                    required[index].add(source)
        for target in action_map.always_after:
            for index in _resolve_target(target, scope, ids):
                if index != source:
                    required[source].add(index)
    return {i: sorted(deps) for i, deps in required.items()}


def enforce_scope_dependencies(scope: ActionSequence) -> ActionSequence:
    """Reorder one scope so declared precedence holds."""
    if not any(a.always_before or a.always_after for a in scope):
        return scope

    required = scope_dependencies(scope)
    emitted: list[int] = []
    seen: set[int] = set()
    in_progress: set[int] = set()
    cyclic: set[int] = set()

    def emit(index: int) -> None:
        seen.add(index)
        in_progress.add(index)
        for dependency in required[index]:
            if dependency in in_progress:
                cyclic.update((index, dependency))
            elif dependency not in seen:
                emit(dependency)
        in_progress.discard(index)
        emitted.append(index)

    for index in range(len(scope)):
        if index not in seen:
            emit(index)

    if cyclic:
        logger.warning(
            "Cyclic precedence between %s; keeping first-discovered order",
            ", ".join(sorted({_describe(scope[i]) for i in cyclic})),
        )
    return tuple(scope[i] for i in emitted)


def _describe(action_map: ActionMap) -> str:
    if action_map.action_id is not None:
        return f"{action_map.action.name} ({action_map.action_id})"
    return action_map.action.name


def enforce_precedence(plan: ActionSequence) -> ActionSequence:
    """Enforce precedence declarations in every scope of a plan."""
    return walk_plan(plan, enforce_scope_dependencies)
