"""Command-line interface: ``pallet plan`` and ``pallet run``."""

import logging
from pathlib import Path

import click

from pallet.config.models import LOG_LEVELS

logger = logging.getLogger(__name__)

# Logging is configured once per process, by the first command invoked.
_logging_configured: bool = False


def _configure_logging(ctx: click.Context) -> None:
    global _logging_configured
    if _logging_configured:
        return

    from pallet.config.logging_factory import configure_logging_from_cli

    options = ctx.obj
    applied = configure_logging_from_cli(
        config_path=options["config_path"],
        level=options["log_level"],
        file=options["log_file"],
        format="json" if options["log_json"] else None,
    )
    _logging_configured = True
    logger.debug(
        "Logging at %s (%s) to %s",
        applied.level,
        applied.format,
        applied.file or "stderr",
    )


@click.group()
@click.version_option(package_name="pallet-plan")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.pallet/config.toml or $PALLET_CONFIG_PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice(sorted(LOG_LEVELS), case_sensitive=False),
    default=None,
    help="Log level (default from config, else info).",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write logs to this file instead of stderr.",
)
@click.option("--log-json", is_flag=True, help="Log JSON lines.")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """pallet - build, translate and run action plans.

    PHASE arguments name a phase function as MODULE:FUNCTION or
    path/to/file.py:FUNCTION.
    """
    ctx.ensure_object(dict)
    ctx.obj.update(
        config_path=config_path,
        log_level=log_level,
        log_file=log_file,
        log_json=log_json,
    )
    _configure_logging(ctx)


# Defer import to avoid circular dependency
def _register_commands() -> None:
    from pallet.cli.plan import plan_command, run_command

    main.add_command(plan_command)
    main.add_command(run_command)


_register_commands()
