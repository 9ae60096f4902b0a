"""Tests for deferred action expansion."""

from __future__ import annotations

import pytest

from pallet.actions import ActionRegistry, ExecutionKind, define_action
from pallet.context import phase_context, phase_contexts
from pallet.exceptions import PlanStructureError
from pallet.plan.api import begin_scope
from pallet.plan.builder import ActionPlan
from pallet.plan.deferred import execute_deferred_action, execute_deferred_actions
from pallet.session import Session


class TestExecuteDeferredAction:
    """Tests for expanding one deferred instance."""

    def test_generated_actions_returned(
        self, make_action, registry: ActionRegistry
    ) -> None:
        package = make_action("package")

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def install_all(*names):
            for name in names:
                package(name)

        _, plan = ActionPlan().schedule(install_all, ("nginx", "curl"))
        session = Session(action_plan=plan)
        (deferred,) = plan.close()

        sub_plan, after = execute_deferred_action(deferred, session)
        assert [(m.action, m.args) for m in sub_plan] == [
            (package, ("nginx",)),
            (package, ("curl",)),
        ]
        assert after.action_plan == plan

    def test_sub_plan_is_classified(
        self, make_action, registry: ActionRegistry
    ) -> None:
        """Generated actions are sorted and merged like any other scope."""
        seq = make_action("seq")
        pkg = make_action("package", ExecutionKind.AGGREGATED)

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def generate():
            seq()
            pkg("a")
            pkg("b")

        _, plan = ActionPlan().schedule(generate)
        (deferred,) = plan.close()
        sub_plan, _ = execute_deferred_action(deferred, Session(action_plan=plan))
        assert [m.action for m in sub_plan] == [pkg, seq]
        assert sub_plan[0].args == (("a",), ("b",))

    def test_recorded_context_rebound(
        self, make_action, registry: ActionRegistry
    ) -> None:
        seen = []

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def generate():
            seen.append(phase_contexts())

        with phase_context("configure"), phase_context("generate"):
            _, plan = ActionPlan().schedule(generate)
        (deferred,) = plan.close()

        with phase_context("translate"):
            execute_deferred_action(deferred, Session(action_plan=plan))
        assert seen == [("configure",)]

    def test_fault_propagates(self, registry: ActionRegistry) -> None:
        """A raising phase function aborts expansion with the original error."""

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def broken():
            raise ValueError("cannot expand")

        _, plan = ActionPlan().schedule(broken)
        (deferred,) = plan.close()
        with pytest.raises(ValueError, match="cannot expand"):
            execute_deferred_action(deferred, Session(action_plan=plan))

    def test_unbalanced_scope_raises(self, registry: ActionRegistry) -> None:
        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def leaky():
            begin_scope()

        _, plan = ActionPlan().schedule(leaky)
        (deferred,) = plan.close()
        with pytest.raises(PlanStructureError, match="unbalanced"):
            execute_deferred_action(deferred, Session(action_plan=plan))


class TestExecuteDeferredActions:
    """Tests for expanding every deferred instance of a plan."""

    def test_expanded_in_place(self, make_action, registry: ActionRegistry) -> None:
        a, b, x = make_action("a"), make_action("b"), make_action("x")

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def generate():
            x(1)
            x(2)

        plan = ActionPlan()
        for action in (a, generate, b):
            _, plan = plan.schedule(action)
        result, _ = execute_deferred_actions(plan.close(), Session(action_plan=plan))
        assert [m.action for m in result] == [a, x, x, b]

    def test_nested_deferred_expanded(
        self, make_action, registry: ActionRegistry
    ) -> None:
        leaf = make_action("leaf")

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def inner():
            leaf()

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def outer():
            inner()

        _, plan = ActionPlan().schedule(outer)
        result, _ = execute_deferred_actions(plan.close(), Session(action_plan=plan))
        assert [m.action for m in result] == [leaf]

    def test_blocks_expanded(self, make_action, registry: ActionRegistry) -> None:
        cond, leaf = make_action("cond"), make_action("leaf")

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def generate():
            leaf()

        _, plan = ActionPlan().schedule(cond)
        plan = plan.begin_scope()
        _, plan = plan.schedule(generate)
        plan = plan.end_scope()

        (owner,), _ = execute_deferred_actions(
            plan.close(), Session(action_plan=plan)
        )
        assert [m.action for m in owner.blocks[0]] == [leaf]

    def test_empty_expansion_removes_instance(
        self, make_action, registry: ActionRegistry
    ) -> None:
        a = make_action("a")

        @define_action(execution=ExecutionKind.DELAYED_IN_SEQUENCE, registry=registry)
        def nothing():
            pass

        plan = ActionPlan()
        for action in (nothing, a):
            _, plan = plan.schedule(action)
        result, _ = execute_deferred_actions(plan.close(), Session(action_plan=plan))
        assert [m.action for m in result] == [a]
