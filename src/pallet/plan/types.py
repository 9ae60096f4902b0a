"""Action map and plan shape types.

An ActionMap is one scheduled occurrence of an action. A translated plan
is a tuple of action maps, each of which may carry nested ``blocks``
(the then/else branches of a conditional).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from pallet.actions.types import Action, ExecutionKind

PrecedenceTarget = Union["Action", str]
"""An action reference, or the action-id of one instance."""

PrecedenceTargets = Union[PrecedenceTarget, Iterable[PrecedenceTarget], None]

PRECEDENCE_OPTIONS = frozenset({"action_id", "always_before", "always_after"})
"""Schedule options that control naming and ordering of an instance."""


def as_targets(value: PrecedenceTargets) -> tuple[PrecedenceTarget, ...]:
    """Normalize a precedence declaration to a tuple of targets."""
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Iterable):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class ActionMap:
    """One instance of an action in an action plan."""

    action: Action
    """The action that is scheduled."""

    args: tuple[Any, ...]
    """Arguments for the implementation.

    After translation, aggregated and collected instances hold a tuple of
    argument tuples, one per merged instance, in first-seen order.
    """

    context: tuple[str, ...] = ()
    """Phase context the action was declared in.

    For merged instances this holds the distinct rendered labels of the
    merged instances instead.
    """

    action_id: str | None = None
    """Label identifying this instance for precedence declarations."""

    always_before: tuple[PrecedenceTarget, ...] = ()
    """Targets this instance must run before (same scope only)."""

    always_after: tuple[PrecedenceTarget, ...] = ()
    """Targets this instance must run after (same scope only)."""

    node_value_path: str | None = None
    """Where the instance's return value is stored at execution time."""

    blocks: tuple[ActionSequence, ...] | None = None
    """Nested sub-plans; ``(then, else)`` for conditional actions."""

    options: Mapping[str, Any] = field(default_factory=dict)
    """Other schedule options (e.g. ``sudo_user``) passed through to executors."""

    @property
    def execution(self) -> ExecutionKind:
        """Execution kind of the scheduled action."""
        return self.action.execution

    @property
    def name(self) -> str:
        """Name of the scheduled action."""
        return self.action.name


ActionSequence = tuple[ActionMap, ...]


def walk_plan(
    plan: Iterable[ActionMap],
    scope_fn: Callable[[ActionSequence], ActionSequence],
) -> ActionSequence:
    """Transform every scope of a plan, innermost scopes first.

    ``scope_fn`` receives one scope (a sequence of action maps whose
    blocks have already been transformed) and returns its replacement.
    Scopes are independent; nothing crosses a block boundary.
    """
    transformed = []
    for action_map in plan:
        if action_map.blocks is not None:
            action_map = replace(
                action_map,
                blocks=tuple(walk_plan(block, scope_fn) for block in action_map.blocks),
            )
        transformed.append(action_map)
    return scope_fn(tuple(transformed))


def iter_plan(plan: Iterable[ActionMap]):
    """Yield every action map in a plan tree, depth first."""
    for action_map in plan:
        yield action_map
        for block in action_map.blocks or ():
            yield from iter_plan(block)

