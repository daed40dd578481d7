"""Shared click parameter types and config resolution for commands."""

from __future__ import annotations

from typing import Any

import click

from vshrink.cli.exit_codes import ExitCode
from vshrink.cli.output import error_exit
from vshrink.config import ConfigSource, VShrinkConfig, get_config
from vshrink.core.formatting import parse_size
from vshrink.domain.models import AcceleratorClass
from vshrink.exceptions import ConfigError

HWACCEL_CHOICES = [
    accel.value for accel in AcceleratorClass if accel is not AcceleratorClass.NONE
]


class SizeParamType(click.ParamType):
    """Byte size given as an integer or a string such as ``15GiB``."""

    name = "size"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> int:
        if isinstance(value, int):
            return value
        try:
            return parse_size(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


SIZE = SizeParamType()


def hwaccel_option(func):
    return click.option(
        "--hwaccel",
        type=click.Choice(HWACCEL_CHOICES, case_sensitive=False),
        default=None,
        help="Hardware backend for decode, tonemap and scale (default: CPU).",
    )(func)


def accelerator_from_option(hwaccel: str | None) -> AcceleratorClass | None:
    if hwaccel is None:
        return None
    return AcceleratorClass.from_name(hwaccel)


def resolve_config(
    ctx: click.Context,
    cli_source: ConfigSource,
    json_output: bool = False,
) -> VShrinkConfig:
    """Merge command-line values over env, config file and defaults.

    Exits with CONFIG_ERROR if the merged configuration is invalid.
    """
    obj = ctx.find_root().obj or {}
    try:
        return get_config(obj.get("config_path"), cli_source=cli_source)
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)
