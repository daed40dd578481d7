"""Typed reads of VSHRINK_* environment variables.

Unparseable values are logged and ignored, so a typo in the environment falls
back to the config file or the defaults instead of aborting the run.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

from vshrink.core.formatting import parse_size

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EnvReader:
    """Reads settings from ``os.environ`` or from an injected mapping.

    Tests pass ``env={...}`` instead of patching the process environment.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def _convert(
        self,
        var: str,
        convert: Callable[[str], T],
        kind: str,
        default: T | None,
    ) -> T | None:
        raw = self._env.get(var)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError:
            logger.warning("Invalid %s value for %s: %s", kind, var, raw)
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Return the raw value; an empty string counts as set."""
        return self._env.get(var, default)

    def get_int(self, var: str, default: int | None = None) -> int | None:
        return self._convert(var, int, "integer", default)

    def get_size(self, var: str, default: int | None = None) -> int | None:
        """Byte count from a plain number or a size such as ``15GiB``."""
        return self._convert(var, parse_size, "size", default)

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Expanded path; with ``must_exist`` a missing target yields default."""
        raw = self._env.get(var)
        if raw is None:
            return default
        path = Path(raw).expanduser()
        if must_exist and not path.exists():
            logger.warning("%s points to non-existent path: %s", var, raw)
            return default
        return path
