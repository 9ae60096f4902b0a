"""Action definitions.

An Action is a registered, idempotent unit of infrastructure work (install a
package, write a file, ...). Each action has a fixed execution kind that
controls how its instances are grouped when a plan is translated, and one
or more named implementations; the executor picks which implementation
runs.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pallet.plan.types import PrecedenceTargets
    from pallet.session import Session


class ExecutionKind(Enum):
    """How instances of an action are arranged in a translated plan.

    Within one scope the translated order is always aggregated actions
    first, then in-sequence actions, then collected actions. The delayed
    kinds are expanded into further actions at translation time and then
    behave like their base kind.
    """

    IN_SEQUENCE = "in_sequence"  # Ordered, never merged
    AGGREGATED = "aggregated"  # Merged per scope, runs before in-sequence
    COLLECTED = "collected"  # Merged per scope, runs after in-sequence
    DELAYED_IN_SEQUENCE = "delayed_in_sequence"
    DELAYED_AGGREGATED = "delayed_aggregated"
    DELAYED_COLLECTED = "delayed_collected"

    @property
    def is_deferred(self) -> bool:
        """True for kinds expanded at translation time."""
        return self in _DEFERRED_BASE

    @property
    def base(self) -> ExecutionKind:
        """The non-deferred kind this kind behaves as after expansion."""
        return _DEFERRED_BASE.get(self, self)

    @property
    def is_merged(self) -> bool:
        """True for kinds whose instances are merged within a scope."""
        return self in (ExecutionKind.AGGREGATED, ExecutionKind.COLLECTED)


_DEFERRED_BASE = {
    ExecutionKind.DELAYED_IN_SEQUENCE: ExecutionKind.IN_SEQUENCE,
    ExecutionKind.DELAYED_AGGREGATED: ExecutionKind.AGGREGATED,
    ExecutionKind.DELAYED_COLLECTED: ExecutionKind.COLLECTED,
}

DEFAULT_IMPLEMENTATION = "default"
"""Name of the implementation used when no other is selected."""


@dataclass(frozen=True)
class ActionImplementation:
    """One named way of carrying out an action."""

    f: Callable[..., Any]
    """The implementation function."""

    flow: bool = False
    """True if the implementation needs the action map itself (conditionals).

    Flow implementations are called ``f(session, action_map, *args)``;
    others are called ``f(session, *args)``. Both return
    ``(value, session)``. Deferred actions are the exception: their default
    implementation is a phase function called ``f(*args)`` at translation
    time.
    """

    metadata: Mapping[str, Any] = field(default_factory=dict)
    """Free-form metadata for executors (e.g. a script language)."""


@dataclass(eq=False)
class Action:
    """A registered action.

    Actions compare by identity: two actions with the same name are still
    different references. Calling an action schedules an instance of it
    into the ambient session's plan and returns the node value handle.
    """

    name: str
    execution: ExecutionKind = ExecutionKind.IN_SEQUENCE
    implementations: dict[str, ActionImplementation] = field(default_factory=dict)
    always_before: PrecedenceTargets = None
    """Default always-before constraints for every instance."""
    always_after: PrecedenceTargets = None
    """Default always-after constraints for every instance."""

    def __repr__(self) -> str:
        return f"Action({self.name!r}, {self.execution.value})"

    def __call__(self, *args: Any, **options: Any):
        from pallet.plan.api import schedule_action

        return schedule_action(self, args, options or None)

    def implementation(
        self, name: str = DEFAULT_IMPLEMENTATION
    ) -> ActionImplementation:
        """Return a named implementation.

        Raises:
            KeyError: If the action has no implementation with that name.
        """
        return self.implementations[name]

    def implement(
        self,
        name: str = DEFAULT_IMPLEMENTATION,
        *,
        flow: bool = False,
        **metadata: Any,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator adding a named implementation to this action.

        Example:
            @package.implement("dry-run")
            def package_dry_run(session, name):
                return f"would install {name}", session
        """

        def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
            self.implementations[name] = ActionImplementation(
                f=f, flow=flow, metadata=metadata
            )
            return f

        return decorator

    def precedence(self) -> dict[str, PrecedenceTargets]:
        """Return the action-level precedence defaults that are set."""
        defaults: dict[str, PrecedenceTargets] = {}
        if self.always_before is not None:
            defaults["always_before"] = self.always_before
        if self.always_after is not None:
            defaults["always_after"] = self.always_after
        return defaults


