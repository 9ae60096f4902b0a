"""Configuration management for pallet.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (PALLET_*)
3. Config file (~/.pallet/config.toml)
4. Default values (lowest priority)
"""

from pallet.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from pallet.config.env import EnvReader
from pallet.config.loader import (
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from pallet.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from pallet.config.models import ExecutionConfig, LoggingConfig, PalletConfig
from pallet.config.toml_parser import load_toml_file

__all__ = [
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "ExecutionConfig",
    "LoggingConfig",
    "PalletConfig",
    "build_logging_config",
    "clear_config_cache",
    "configure_logging_from_cli",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    "load_toml_file",
    "source_from_env",
    "source_from_file",
]
