"""TOML config file loading."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pallet.exceptions import ConfigError

logger = logging.getLogger(__name__)


def load_toml_file(path: Path, *, strict: bool = False) -> dict[str, Any]:
    """Load and parse a TOML file.

    Args:
        path: Path to the TOML file.
        strict: If True, raise ConfigError when the file cannot be read or
            parsed. If False, log a warning and return an empty dict.

    Returns:
        Parsed dictionary; empty if the file does not exist.

    Raises:
        ConfigError: When strict=True and the file is unreadable or invalid.
    """
    if not path.exists():
        logger.debug("TOML file not found: %s", path)
        return {}

    try:
        return tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigError(f"Cannot load config file {path}: {e}") from e
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
