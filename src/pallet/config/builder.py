"""Configuration builder with explicit layering.

ConfigBuilder composes PalletConfig from several ConfigSources; later
sources override earlier ones for every value they set.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from pallet.config.env import EnvReader
from pallet.config.models import (
    LOG_FORMATS,
    LOG_LEVELS,
    ExecutionConfig,
    LoggingConfig,
    PalletConfig,
)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None means "not specified in this source" and never overrides a value
    from a lower-precedence source.
    """

    # Logging config
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None

    # Execution config
    execution_implementation: str | None = None
    execution_stop_on_error: bool | None = None


class ConfigBuilder:
    """Builds PalletConfig by layering ConfigSources with precedence.

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build()
    """

    def __init__(self) -> None:
        """Initialize the builder with no values set."""
        self._values: dict[str, Any] = {}
        self._sources: dict[str, str] = {}

    def apply(self, source: ConfigSource, source_name: str = "") -> None:
        """Apply a configuration source, overriding existing values.

        Args:
            source: Configuration source to apply.
            source_name: Label recorded for each value this source sets.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value
                self._sources[field_obj.name] = source_name

    def source_of(self, key: str) -> str | None:
        """Return the name of the source that set ``key``, if any."""
        return self._sources.get(key)

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> PalletConfig:
        """Build the final PalletConfig with defaults for unset values.

        Raises:
            ValueError: If a layered value fails model validation.
        """
        log_defaults = LoggingConfig()
        logging_config = LoggingConfig(
            level=self._get("logging_level", log_defaults.level),
            file=self._get("logging_file", log_defaults.file),
            format=self._get("logging_format", log_defaults.format),
            include_stderr=self._get(
                "logging_include_stderr", log_defaults.include_stderr
            ),
            max_bytes=self._get("logging_max_bytes", log_defaults.max_bytes),
            backup_count=self._get(
                "logging_backup_count", log_defaults.backup_count
            ),
        )

        exec_defaults = ExecutionConfig()
        execution = ExecutionConfig(
            implementation=self._get(
                "execution_implementation", exec_defaults.implementation
            ),
            stop_on_error=self._get(
                "execution_stop_on_error", exec_defaults.stop_on_error
            ),
        )

        return PalletConfig(logging=logging_config, execution=execution)


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create a ConfigSource from a parsed TOML config file.

    Recognized tables are ``[logging]`` and ``[execution]``.
    """
    logging_conf = file_config.get("logging", {})
    execution = file_config.get("execution", {})

    log_file_str = logging_conf.get("file")
    log_file = Path(log_file_str).expanduser() if log_file_str else None

    return ConfigSource(
        logging_level=logging_conf.get("level"),
        logging_file=log_file,
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
        execution_implementation=execution.get("implementation"),
        execution_stop_on_error=execution.get("stop_on_error"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create a ConfigSource from PALLET_* environment variables."""
    return ConfigSource(
        logging_level=reader.get_choice("PALLET_LOG_LEVEL", LOG_LEVELS),
        logging_file=reader.get_path("PALLET_LOG_FILE"),
        logging_format=reader.get_choice("PALLET_LOG_FORMAT", LOG_FORMATS),
        logging_max_bytes=reader.get_int("PALLET_LOG_MAX_BYTES"),
        execution_implementation=reader.get_str("PALLET_IMPLEMENTATION"),
        execution_stop_on_error=reader.get_bool("PALLET_STOP_ON_ERROR"),
    )
