"""Configuration data models."""

from dataclasses import dataclass, field
from pathlib import Path

LOG_LEVELS = frozenset({"debug", "info", "warning", "error"})
LOG_FORMATS = frozenset({"text", "json"})


@dataclass
class LoggingConfig:
    """Where and how pallet logs."""

    level: str = "info"

    # None logs to stderr only
    file: Path | None = None

    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.level.lower() not in LOG_LEVELS:
            raise ValueError(
                f"level must be one of {sorted(LOG_LEVELS)}, got {self.level}"
            )
        if self.format.lower() not in LOG_FORMATS:
            raise ValueError(
                f"format must be one of {sorted(LOG_FORMATS)}, got {self.format}"
            )
        if self.max_bytes < 0 or self.backup_count < 0:
            raise ValueError("max_bytes and backup_count must not be negative")


@dataclass
class ExecutionConfig:
    """How translated plans are run."""

    implementation: str = "default"
    """Name of the action implementation the executor prefers."""

    stop_on_error: bool = True
    """Stop the run at the first failing action (else log and continue)."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.implementation:
            raise ValueError("implementation must be a non-empty string")


@dataclass
class PalletConfig:
    """Main configuration container."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
