"""Human-readable and JSON rendering of plans and results."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from pallet.context import context_label
from pallet.plan.results import StepResult
from pallet.plan.types import ActionMap

BRANCH_NAMES = ("then", "else")


def format_plan(plan: Sequence[ActionMap], indent: int = 0) -> list[str]:
    """Render a translated plan as indented lines, one per action."""
    lines: list[str] = []
    pad = "  " * indent
    for action_map in plan:
        label = context_label(action_map)
        parts = [f"{pad}{action_map.action.name}"]
        if action_map.action_id:
            parts.append(f"#{action_map.action_id}")
        parts.append(f"({action_map.execution.base.value})")
        if label:
            parts.append(label)
        lines.append(" ".join(parts))
        for name, block in zip(BRANCH_NAMES, action_map.blocks or (), strict=False):
            lines.append(f"{pad}  {name}:")
            lines.extend(format_plan(block, indent + 2))
    return lines


def plan_to_data(plan: Sequence[ActionMap]) -> list[dict[str, Any]]:
    """Convert a translated plan to JSON-serializable data."""
    data = []
    for action_map in plan:
        entry: dict[str, Any] = {
            "action": action_map.action.name,
            "execution": action_map.execution.base.value,
            "args": action_map.args,
            "context": list(action_map.context),
            "node_value_path": action_map.node_value_path,
        }
        if action_map.action_id:
            entry["action_id"] = action_map.action_id
        if action_map.blocks is not None:
            entry["blocks"] = [plan_to_data(block) for block in action_map.blocks]
        data.append(entry)
    return data


def plan_to_json(plan: Sequence[ActionMap]) -> str:
    """Serialize a translated plan to a JSON string."""
    return json.dumps(plan_to_data(plan), indent=2, default=repr)


def format_results(results: Sequence[StepResult]) -> list[str]:
    """Render execution results, one line per executed action."""
    lines = []
    for result in results:
        if result.error is not None:
            status = f"FAILED: {result.error.message}"
        elif result.stopped:
            status = "stopped"
        else:
            status = "ok"
        lines.append(f"{result.action or '-'}: {status}")
    return lines
