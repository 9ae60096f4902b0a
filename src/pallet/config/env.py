"""PALLET_* environment variable access.

EnvReader wraps a mapping (os.environ by default) so configuration code
can be tested with a plain dict.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Collection, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


class EnvReader:
    """Typed reads of environment variables.

    Unset variables yield the default. Values that cannot be converted are
    logged and also yield the default, so a bad variable never aborts a run.

    Example:
        reader = EnvReader(env={"PALLET_STOP_ON_ERROR": "no"})
        reader.get_bool("PALLET_STOP_ON_ERROR")  # False
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def _read(
        self, var: str, convert: Callable[[str], T], default: T | None
    ) -> T | None:
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return convert(value)
        except ValueError as e:
            logger.warning("Ignoring %s=%r: %s", var, value, e)
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Return the raw value; an empty string counts as set."""
        return self._read(var, str, default)

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Return the value as an integer."""
        return self._read(var, int, default)

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Return the value as a boolean.

        true/1/yes/on (any case) are true; every other value is false.
        """
        return self._read(var, lambda v: v.lower() in _TRUE_VALUES, default)

    def get_choice(
        self, var: str, choices: Collection[str], default: str | None = None
    ) -> str | None:
        """Return the lowercased value if it is one of ``choices``."""

        def convert(value: str) -> str:
            if value.lower() not in choices:
                raise ValueError(f"expected one of {', '.join(sorted(choices))}")
            return value.lower()

        return self._read(var, convert, default)

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Return the value as a path with ``~`` expanded; empty means unset."""
        if not self._env.get(var):
            return default
        return Path(self._env[var]).expanduser()
