"""Shared test fixtures for pallet."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from pallet.actions import Action, ActionRegistry, ExecutionKind, define_action
from pallet.config import clear_config_cache
from pallet.plan.types import ActionMap
from pallet.session import Session


class RecordingExecutor:
    """Executor that records each action it runs and returns its args.

    Actions whose names are in ``failures`` raise RuntimeError instead.
    Actions with blocks (conditionals) run their default flow implementation.
    """

    def __init__(self, failures: set[str] | None = None) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.failures = failures or set()

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def __call__(self, session: Session, action_map: ActionMap) -> tuple[Any, Session]:
        name = action_map.action.name
        self.calls.append((name, action_map.args))
        if name in self.failures:
            raise RuntimeError(f"{name} failed")
        impl = action_map.action.implementations.get("default")
        if impl is not None and impl.flow:
            return impl.f(session, action_map, *action_map.args)
        return action_map.args, session


@pytest.fixture
def registry() -> ActionRegistry:
    """Return an empty action registry isolated from the default one."""
    return ActionRegistry()


@pytest.fixture
def make_action(registry: ActionRegistry) -> Callable[..., Action]:
    """Factory defining a no-op action in the isolated registry."""

    def factory(
        name: str,
        execution: ExecutionKind = ExecutionKind.IN_SEQUENCE,
        **kwargs: Any,
    ) -> Action:
        def implementation(session: Session, *args: Any) -> tuple[Any, Session]:
            return args, session

        return define_action(name, execution=execution, registry=registry, **kwargs)(
            implementation
        )

    return factory


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    """Return an executor that records the actions it runs."""
    return RecordingExecutor()


@pytest.fixture
def session() -> Session:
    """Return an empty session."""
    return Session()


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Keep cached config files from leaking between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def failing_executor() -> Callable[..., RecordingExecutor]:
    """Factory for recording executors that fail the named actions."""

    def factory(*names: str) -> RecordingExecutor:
        return RecordingExecutor(failures=set(names))

    return factory
