"""Tests for execution-kind classification and merging."""

from __future__ import annotations

from pallet.actions import ExecutionKind
from pallet.context import phase_context
from pallet.plan.builder import ActionPlan
from pallet.plan.executions import (
    group_by_action,
    transform_executions,
    transform_scope_executions,
)


def _build(*steps):
    """Schedule (action, args) pairs or (action, args, options) triples."""
    plan = ActionPlan()
    for step in steps:
        action, args, *options = step
        _, plan = plan.schedule(action, args, options[0] if options else None)
    return plan.close()


class TestTransformScopeExecutions:
    """Tests for per-scope sorting and merging."""

    def test_kind_order(self, make_action) -> None:
        """Aggregated first, then in-sequence, then collected."""
        seq = make_action("seq")
        agg = make_action("agg", ExecutionKind.AGGREGATED)
        col = make_action("col", ExecutionKind.COLLECTED)
        scope = _build((col, ()), (seq, ()), (agg, ()))
        result = transform_scope_executions(scope)
        assert [m.action for m in result] == [agg, seq, col]

    def test_in_sequence_order_preserved(self, make_action) -> None:
        a, b, c = make_action("a"), make_action("b"), make_action("c")
        scope = _build((b, ()), (c, ()), (a, ()), (b, (2,)))
        result = transform_scope_executions(scope)
        assert [m.action for m in result] == [b, c, a, b]

    def test_aggregated_instances_merged(self, make_action) -> None:
        """Merged args hold one tuple per instance, in scheduling order."""
        pkg = make_action("package", ExecutionKind.AGGREGATED)
        seq = make_action("seq")
        scope = _build((pkg, ("nginx",)), (seq, ()), (pkg, ("curl",)))
        result = transform_scope_executions(scope)
        assert len(result) == 2
        merged = result[0]
        assert merged.action is pkg
        assert merged.args == (("nginx",), ("curl",))
        assert merged.node_value_path == scope[0].node_value_path

    def test_single_aggregated_instance_wrapped(self, make_action) -> None:
        pkg = make_action("package", ExecutionKind.AGGREGATED)
        (merged,) = transform_scope_executions(_build((pkg, ("nginx",))))
        assert merged.args == (("nginx",),)

    def test_action_id_splits_groups(self, make_action) -> None:
        pkg = make_action("package", ExecutionKind.COLLECTED)
        scope = _build(
            (pkg, ("a",)), (pkg, ("b",), {"action_id": "late"}), (pkg, ("c",))
        )
        result = transform_scope_executions(scope)
        assert [m.args for m in result] == [(("a",), ("c",)), (("b",),)]

    def test_deferred_sorted_with_base_kind(self, make_action) -> None:
        seq = make_action("seq")
        deferred = make_action("later", ExecutionKind.DELAYED_AGGREGATED)
        scope = _build((seq, ()), (deferred, ()))
        result = transform_scope_executions(scope)
        assert [m.action for m in result] == [deferred, seq]

    def test_merged_context_labels(self, make_action) -> None:
        pkg = make_action("package", ExecutionKind.AGGREGATED)
        plan = ActionPlan()
        with phase_context("web"):
            _, plan = plan.schedule(pkg, ("nginx",))
        with phase_context("db"):
            _, plan = plan.schedule(pkg, ("postgresql",))
        _, plan = plan.schedule(pkg, ("curl",))
        (merged,) = transform_scope_executions(plan.close())
        assert merged.context == ("[web]", "[db]")

    def test_merged_deferred_keeps_phase_path(self, make_action) -> None:
        """Expansion re-binds the path, so it is not rendered as a label."""
        deferred = make_action("later", ExecutionKind.DELAYED_COLLECTED)
        plan = ActionPlan()
        with phase_context("web"), phase_context("later"):
            _, plan = plan.schedule(deferred, (1,))
            _, plan = plan.schedule(deferred, (2,))
        (merged,) = transform_scope_executions(plan.close())
        assert merged.context == ("web",)
        assert merged.args == ((1,), (2,))


class TestGroupByAction:
    """Tests for group_by_action."""

    def test_first_seen_order(self, make_action) -> None:
        a = make_action("a", ExecutionKind.AGGREGATED)
        b = make_action("b", ExecutionKind.AGGREGATED)
        scope = _build((a, (1, 2)), (b, (3, 4)), (a, (5, 6)))
        result = group_by_action(scope)
        assert [(m.action, m.args) for m in result] == [
            (a, ((1, 2), (5, 6))),
            (b, ((3, 4),)),
        ]


class TestTransformExecutions:
    """Tests for whole-plan classification."""

    def test_blocks_transformed_independently(self, make_action) -> None:
        """Grouping never crosses a block boundary."""
        cond = make_action("cond")
        pkg = make_action("package", ExecutionKind.AGGREGATED)
        seq = make_action("seq")

        plan = ActionPlan()
        _, plan = plan.schedule(pkg, ("root",))
        _, plan = plan.schedule(cond)
        plan = plan.begin_scope()
        _, plan = plan.schedule(seq)
        _, plan = plan.schedule(pkg, ("inner",))
        plan = plan.end_scope()

        result = transform_executions(plan.close())
        assert [m.action for m in result] == [pkg, cond]
        assert result[0].args == (("root",),)
        block = result[1].blocks[0]
        assert [m.action for m in block] == [pkg, seq]
        assert block[0].args == (("inner",),)
