"""CLI module for vshrink."""

import logging
from pathlib import Path

import click

from vshrink.cli.exit_codes import ExitCode
from vshrink.cli.output import error_exit
from vshrink.config import build_logging_config, get_config
from vshrink.exceptions import ConfigError
from vshrink.logging import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="vshrink")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.vshrink/config.toml or VSHRINK_CONFIG_PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """vshrink - Re-encode oversized videos to fit a target size."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    try:
        config = get_config(config_path)
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)

    configure_logging(
        build_logging_config(
            config.logging,
            level=log_level,
            file=log_file,
            json_format=log_json,
        )
    )
    logger.debug(
        "vshrink starting: config=%s, log_level=%s",
        config_path or "default",
        log_level or config.logging.level,
    )
    ctx.obj["config"] = config


# Defer import to avoid circular dependency
def _register_commands():
    from vshrink.cli.convert import convert_command
    from vshrink.cli.doctor import doctor_command
    from vshrink.cli.plan import plan_command

    main.add_command(convert_command)
    main.add_command(plan_command)
    main.add_command(doctor_command)


_register_commands()
