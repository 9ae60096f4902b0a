"""Execution-kind classification and aggregation.

Each scope of a plan is reorganised by execution kind: aggregated
instances first, then in-sequence instances, then collected instances.
Deferred kinds are sorted with their base kind.

Aggregated and collected instances of the same action and action-id are
collapsed into a single instance whose ``args`` is the sequence of every
merged instance's argument tuple, so the implementation runs once with
all of them.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from pallet.actions.types import ExecutionKind
from pallet.context import multi_context_string
from pallet.plan.types import ActionMap, ActionSequence, walk_plan

logger = logging.getLogger(__name__)

EXECUTION_ORDER = (
    ExecutionKind.AGGREGATED,
    ExecutionKind.IN_SEQUENCE,
    ExecutionKind.COLLECTED,
)
"""Order in which execution kinds appear within a scope."""


def _merged_context(instances: list[ActionMap]) -> tuple[str, ...]:
    """Render each instance path as an ``[a: b]`` label; keep distinct labels."""
    labels: list[str] = []
    for instance in instances:
        label = multi_context_string(instance.context)
        if label and label not in labels:
            labels.append(label)
    return tuple(labels)


def group_by_action(scope: ActionSequence) -> ActionSequence:
    """Merge instances sharing (action, action-id), keeping first-seen order.

    The merged instance takes every field from the first instance,
    including its node-value path; only ``args`` and ``context`` are
    combined. Deferred instances keep the first phase path, which is
    re-bound when they are expanded.

    Example:
        [a(1, 2), b(3, 4), a(5, 6)] -> [a((1, 2), (5, 6)), b((3, 4),)]
    """
    groups: dict[tuple[int, str | None], list[ActionMap]] = {}
    for instance in scope:
        key = (id(instance.action), instance.action_id)
        groups.setdefault(key, []).append(instance)

    merged = []
    for instances in groups.values():
        first = instances[0]
        merged.append(
            replace(
                first,
                args=tuple(instance.args for instance in instances),
                context=(
                    first.context
                    if first.execution.is_deferred
                    else _merged_context(instances)
                ),
            )
        )
        if len(instances) > 1:
            logger.debug(
                "Merged %d instances of %s", len(instances), first.action.name
            )
    return tuple(merged)


def transform_scope_executions(scope: ActionSequence) -> ActionSequence:
    """Sort one scope by execution kind, merging aggregated and collected groups."""
    by_kind: dict[ExecutionKind, list[ActionMap]] = {
        kind: [] for kind in EXECUTION_ORDER
    }
    for instance in scope:
        by_kind[instance.execution.base].append(instance)

    result: list[ActionMap] = []
    for kind in EXECUTION_ORDER:
        instances = tuple(by_kind[kind])
        if kind.is_merged:
            instances = group_by_action(instances)
        result.extend(instances)
    return tuple(result)


def transform_executions(plan: ActionSequence) -> ActionSequence:
    """Apply execution-kind sorting and merging to every scope of a plan."""
    return walk_plan(plan, transform_scope_executions)
