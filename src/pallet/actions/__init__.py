"""Action definitions and registry.

Flow-control actions live in pallet.actions.flow, which depends on the
executor core and is imported separately.
"""

from pallet.actions.registry import ActionRegistry, define_action, get_registry
from pallet.actions.types import (
    DEFAULT_IMPLEMENTATION,
    Action,
    ActionImplementation,
    ExecutionKind,
)

__all__ = [
    "DEFAULT_IMPLEMENTATION",
    "Action",
    "ActionImplementation",
    "ActionRegistry",
    "ExecutionKind",
    "define_action",
    "get_registry",
]
