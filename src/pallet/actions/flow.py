"""Flow-control actions."""

from __future__ import annotations

from pallet.actions.registry import define_action
from pallet.plan.execute import execute_if


@define_action(name="if", flow=True)
def if_action(session, action_map, value):
    """Run the then block when ``value`` is truthy, else the else block."""
    return execute_if(session, action_map, value)
