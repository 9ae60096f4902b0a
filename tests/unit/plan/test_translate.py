"""Tests for plan translation."""

from __future__ import annotations

import pytest

from pallet.actions import ActionRegistry, ExecutionKind, define_action
from pallet.exceptions import PlanStructureError
from pallet.plan.builder import ActionPlan
from pallet.plan.translate import is_translated, translate
from pallet.session import Session


class TestIsTranslated:
    """Tests for is_translated."""

    def test_builder_plan_not_translated(self) -> None:
        assert not is_translated(ActionPlan())

    def test_sequence_translated(self) -> None:
        assert is_translated(())
        assert is_translated([])

    def test_other_values_rejected(self) -> None:
        with pytest.raises(PlanStructureError):
            is_translated("plan")
        with pytest.raises(PlanStructureError):
            is_translated(None)


class TestTranslate:
    """Tests for translate."""

    def test_passes_applied_in_order(
        self, make_action, registry: ActionRegistry
    ) -> None:
        """Grouping, then deferred expansion, then precedence."""
        pkg = make_action("package", ExecutionKind.AGGREGATED)
        seq = make_action("seq")
        last = make_action("last")

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def generate():
            seq()

        plan = ActionPlan()
        _, plan = plan.schedule(last, (), {"always_after": seq})
        _, plan = plan.schedule(generate)
        _, plan = plan.schedule(pkg, ("nginx",))

        result, session = translate(plan, Session(action_plan=plan))
        assert [m.action for m in result] == [pkg, seq, last]
        assert session.action_plan is None

    def test_translation_is_idempotent(self, make_action) -> None:
        a, b = make_action("a"), make_action("b")
        plan = ActionPlan()
        _, plan = plan.schedule(a, (), {"always_after": b})
        _, plan = plan.schedule(b)

        once, session = translate(plan, Session(action_plan=plan))
        twice, _ = translate(once, session)
        assert is_translated(once)
        assert is_translated(twice)
        assert twice == once

    def test_open_scope_rejected(self, make_action) -> None:
        _, plan = ActionPlan().schedule(make_action("cond"))
        plan = plan.begin_scope()
        with pytest.raises(PlanStructureError):
            translate(plan, Session(action_plan=plan))

    def test_empty_plan(self) -> None:
        result, _ = translate(ActionPlan(), Session())
        assert result == ()

    def test_expansion_fault_aborts(self, registry: ActionRegistry) -> None:
        @define_action(execution=ExecutionKind.DELAYED_COLLECTED, registry=registry)
        def broken(*arg_tuples):
            raise RuntimeError("no inventory")

        _, plan = ActionPlan().schedule(broken)
        with pytest.raises(RuntimeError, match="no inventory"):
            translate(plan, Session(action_plan=plan))
