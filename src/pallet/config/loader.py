"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (PALLET_*)
3. Config file (~/.pallet/config.toml)
4. Default values

Environment variables:
- PALLET_CONFIG_PATH: Path to config file (overrides default location)
- PALLET_LOG_LEVEL: Log level (debug, info, warning, error)
- PALLET_LOG_FILE: Log file path
- PALLET_LOG_FORMAT: Log format (text, json)
- PALLET_LOG_MAX_BYTES: Log file rotation threshold in bytes
- PALLET_IMPLEMENTATION: Preferred action implementation name
- PALLET_STOP_ON_ERROR: Stop at the first failing action (true/false)
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from pallet.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from pallet.config.env import EnvReader
from pallet.config.models import PalletConfig
from pallet.config.toml_parser import load_toml_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".pallet"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# path -> (parsed dict, mtime); reloaded when the file changes
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


def get_default_config_path(env_reader: EnvReader | None = None) -> Path:
    """Get the config file path, honouring PALLET_CONFIG_PATH."""
    reader = env_reader or EnvReader()
    return reader.get_path("PALLET_CONFIG_PATH", DEFAULT_CONFIG_FILE)


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from a TOML file.

    Results are cached with mtime-based invalidation.

    Args:
        path: Path to config file. If None, uses the default location.
        strict: If True, raise ConfigError on parse failures.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        current_mtime = 0.0

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return cached[0]

        result = load_toml_file(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    log_level: str | None = None,
    implementation: str | None = None,
    stop_on_error: bool | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> PalletConfig:
    """Get pallet configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides PALLET_CONFIG_PATH).
        log_level: CLI override for the log level.
        implementation: CLI override for the preferred implementation.
        stop_on_error: CLI override for stop-on-error.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise ConfigError on config file parse failures.

    Returns:
        PalletConfig with merged configuration.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(
        config_path or get_default_config_path(reader), strict=strict
    )

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config), source_name="file")
    builder.apply(source_from_env(reader), source_name="env")
    builder.apply(
        ConfigSource(
            logging_level=log_level,
            execution_implementation=implementation,
            execution_stop_on_error=stop_on_error,
        ),
        source_name="cli",
    )
    return builder.build()
