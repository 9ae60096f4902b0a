"""Plan and run commands.

Both commands take a phase function reference, ``module:function`` or
``path/to/file.py:function``, build its plan and translate it.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from pallet.config import get_config
from pallet.exceptions import PalletError
from pallet.executors import DryRunExecutor, ImplementationExecutor
from pallet.plan import (
    build_plan,
    continue_on_error,
    execute,
    first_error,
    stop_execution_on_error,
    translate,
)
from pallet.plan.types import ActionSequence
from pallet.session import Session

from .formatting import format_plan, format_results, plan_to_json

logger = logging.getLogger(__name__)


def load_phase_function(reference: str) -> Callable[..., Any]:
    """Resolve ``module:function`` or ``file.py:function`` to a callable.

    Raises:
        click.BadParameter: If the reference cannot be resolved.
    """
    target, sep, attr = reference.rpartition(":")
    if not sep or not target or not attr:
        raise click.BadParameter(
            f"expected MODULE:FUNCTION, got {reference!r}", param_hint="PHASE"
        )

    try:
        if target.endswith(".py"):
            path = Path(target)
            spec = importlib.util.spec_from_file_location(path.stem, path)
            if spec is None or spec.loader is None:
                raise ImportError(f"cannot load {path}")
            module = importlib.util.module_from_spec(spec)
            sys.modules[path.stem] = module
            spec.loader.exec_module(module)
        else:
            module = importlib.import_module(target)
    except (ImportError, OSError) as e:
        raise click.BadParameter(str(e), param_hint="PHASE") from e

    f = getattr(module, attr, None)
    if not callable(f):
        raise click.BadParameter(
            f"{attr!r} in {target} is not callable", param_hint="PHASE"
        )
    return f


def _translated_plan(
    reference: str, phase: str | None
) -> tuple[ActionSequence, Session]:
    phase_fn = load_phase_function(reference)
    try:
        session = build_plan(phase_fn, Session(), phase=phase)
        return translate(session.action_plan, session)
    except PalletError as e:
        raise click.ClickException(str(e)) from e


@click.command("plan")
@click.argument("reference", metavar="PHASE")
@click.option("--phase", "phase_name", default=None, help="Phase context label.")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
def plan_command(reference: str, phase_name: str | None, json_output: bool) -> None:
    """Build and translate the plan of a phase function and print it."""
    plan, _ = _translated_plan(reference, phase_name)
    if json_output:
        click.echo(plan_to_json(plan))
        return
    if not plan:
        click.echo("Plan is empty.")
        return
    for line in format_plan(plan):
        click.echo(line)


@click.command("run")
@click.argument("reference", metavar="PHASE")
@click.option("--phase", "phase_name", default=None, help="Phase context label.")
@click.option("--dry-run", is_flag=True, help="Record actions without running them.")
@click.option(
    "--keep-going/--stop-on-error",
    default=None,
    help="Continue after a failing action (default from config).",
)
@click.option(
    "--implementation",
    default=None,
    help="Action implementation to run (default from config).",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    reference: str,
    phase_name: str | None,
    dry_run: bool,
    keep_going: bool | None,
    implementation: str | None,
) -> None:
    """Build, translate and execute the plan of a phase function."""
    config = get_config(
        config_path=ctx.obj.get("config_path") if ctx.obj else None,
        implementation=implementation,
        stop_on_error=None if keep_going is None else not keep_going,
    )
    plan, session = _translated_plan(reference, phase_name)

    if dry_run:
        executor = DryRunExecutor()
        results, _ = execute(plan, session, executor)
        for record in executor.records:
            label = f"{record.label} " if record.label else ""
            click.echo(f"{label}{record.action} {record.args!r}")
        return

    status_fn = (
        stop_execution_on_error if config.execution.stop_on_error else continue_on_error
    )
    results, _ = execute(
        plan,
        session,
        ImplementationExecutor(config.execution.implementation),
        status_fn,
    )
    for line in format_results(results):
        click.echo(line)

    error = first_error(results)
    if error is not None:
        click.echo(f"Error: {error.message}", err=True)
        ctx.exit(1)
