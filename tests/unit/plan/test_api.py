"""Tests for the scheduling surface used by phase functions."""

from __future__ import annotations

import pytest

from pallet.actions.flow import if_action
from pallet.context import phase_contexts
from pallet.exceptions import PlanStructureError
from pallet.plan.api import (
    begin_scope,
    build_plan,
    end_scope,
    plan_fn,
    plan_when,
    schedule_action,
)
from pallet.plan.node_values import NodeValue
from pallet.session import Session, session_scope


class TestBuildPlan:
    """Tests for build_plan."""

    def test_collects_scheduled_actions(self, make_action) -> None:
        a, b = make_action("a"), make_action("b")

        def phase():
            a(1)
            b(2)

        session = build_plan(phase)
        assert [(m.action, m.args) for m in session.action_plan.close()] == [
            (a, (1,)),
            (b, (2,)),
        ]

    def test_phase_label_recorded(self, make_action) -> None:
        a = make_action("a")
        session = build_plan(lambda: a(), Session(), phase="configure")
        (instance,) = session.action_plan.close()
        assert instance.context == ("configure",)

    def test_args_passed_to_phase_fn(self, make_action) -> None:
        a = make_action("a")
        session = build_plan(lambda name: a(name), None, "nginx")
        (instance,) = session.action_plan.close()
        assert instance.args == ("nginx",)

    def test_builds_into_existing_plan(self, make_action) -> None:
        a, b = make_action("a"), make_action("b")
        session = build_plan(lambda: a())
        session = build_plan(lambda: b(), session)
        assert len(session.action_plan) == 2

    def test_session_data_preserved(self, make_action) -> None:
        session = build_plan(lambda: None, Session(data={"node": "web1"}))
        assert session.data == {"node": "web1"}

    def test_fault_propagates(self) -> None:
        def phase():
            raise KeyError("missing setting")

        with pytest.raises(KeyError):
            build_plan(phase)


class TestScheduling:
    """Tests for schedule_action and scopes."""

    def test_action_call_returns_node_value(self, make_action) -> None:
        handles = []
        build_plan(lambda: handles.append(make_action("a")("x")))
        assert isinstance(handles[0], NodeValue)

    def test_options_passed_through(self, make_action) -> None:
        a = make_action("a")
        session = build_plan(lambda: a("x", action_id="first", sudo_user="root"))
        (instance,) = session.action_plan.close()
        assert instance.action_id == "first"
        assert instance.options == {"sudo_user": "root"}

    def test_schedule_action_direct(self, make_action) -> None:
        a = make_action("a")
        session = build_plan(lambda: schedule_action(a, ("x",)))
        assert len(session.action_plan) == 1

    def test_end_scope_at_root_raises(self) -> None:
        with session_scope(Session()):
            with pytest.raises(PlanStructureError):
                end_scope()

    def test_explicit_scopes(self, make_action) -> None:
        cond, inner = make_action("cond"), make_action("inner")

        def phase():
            cond()
            begin_scope()
            inner()
            end_scope()

        (owner,) = build_plan(phase).action_plan.close()
        assert [m.action for m in owner.blocks[0]] == [inner]


class TestPlanWhen:
    """Tests for plan_when."""

    def test_then_and_else_blocks(self, make_action) -> None:
        x, y = make_action("x"), make_action("y")

        def phase():
            plan_when(True, lambda: x(), lambda: y())

        (conditional,) = build_plan(phase).action_plan.close()
        assert conditional.action is if_action
        assert conditional.args == (True,)
        then_block, else_block = conditional.blocks
        assert [m.action for m in then_block] == [x]
        assert [m.action for m in else_block] == [y]

    def test_then_only(self, make_action) -> None:
        x = make_action("x")
        session = build_plan(lambda: plan_when(False, lambda: x()))
        (conditional,) = session.action_plan.close()
        assert len(conditional.blocks) == 1


class TestPlanFn:
    """Tests for the plan_fn decorator."""

    def test_pushes_function_name(self) -> None:
        @plan_fn
        def nginx():
            return phase_contexts()

        assert nginx() == ("nginx",)

    def test_custom_label(self) -> None:
        @plan_fn(label="web server")
        def nginx():
            return phase_contexts()

        assert nginx() == ("web server",)
        assert nginx.__name__ == "nginx"
