"""Argument evaluation.

Action arguments are evaluated against the session immediately before the
action runs. Node values resolve to the stored result of the action that
produced them; delayed arguments are computed from the session. Every
other value is passed through unchanged, whatever its position.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pallet.plan.node_values import NodeValue

if TYPE_CHECKING:
    from pallet.plan.types import ActionMap
    from pallet.session import Session


@dataclass(frozen=True)
class DelayedArgument:
    """An argument computed from the session at execution time.

    Example:
        hostname = DelayedArgument(lambda session: session.data["hostname"])
    """

    f: Callable[[Session], Any]

    def evaluate(self, session: Session) -> Any:
        return self.f(session)


def delayed(f: Callable[[Session], Any]) -> DelayedArgument:
    """Wrap ``f`` so it is evaluated against the session at execution time."""
    return DelayedArgument(f)


def evaluate(arg: Any, session: Session) -> Any:
    """Evaluate a single argument.

    Raises:
        NodeValueError: If a node value's action has not run yet.
    """
    if arg is None:
        return None
    if isinstance(arg, NodeValue):
        return arg.get(session)
    if isinstance(arg, DelayedArgument):
        return arg.evaluate(session)
    return arg


def evaluate_args(session: Session, args: Iterable[Any]) -> tuple[Any, ...]:
    """Evaluate an argument tuple."""
    return tuple(evaluate(arg, session) for arg in args)


def evaluate_arguments(session: Session, action_map: ActionMap) -> tuple[Any, ...]:
    """Evaluate the arguments of an action map.

    Merged (aggregated or collected) instances hold one argument tuple per
    merged instance; each tuple is evaluated independently.
    """
    if action_map.execution.base.is_merged:
        return tuple(evaluate_args(session, args) for args in action_map.args)
    return evaluate_args(session, action_map.args)
