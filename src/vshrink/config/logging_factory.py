"""Merge the global CLI logging options into the configured LoggingConfig."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from vshrink.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    json_format: bool = False,
) -> LoggingConfig:
    """Return ``base`` with the given CLI overrides applied.

    Options left as None keep the value from the config file or environment.
    ``json_format`` only switches to JSON; it never forces text output over a
    configured ``format = "json"``.

    Raises:
        ValueError: If an override is not a valid logging value.
    """
    overrides: dict[str, object] = {}
    if level is not None:
        overrides["level"] = level
    if file is not None:
        overrides["file"] = file
    if json_format:
        overrides["format"] = "json"
    if not overrides:
        return base
    return replace(base, **overrides)
