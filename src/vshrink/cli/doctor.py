"""vshrink doctor command for checking external tool health."""

import sys

import click

from vshrink.cli.exit_codes import ExitCode
from vshrink.cli.options import resolve_config
from vshrink.cli.output import echo_json
from vshrink.config import ConfigSource
from vshrink.tools import check_tool_availability
from vshrink.tools.detection import INSTALL_HINTS


def _format_status(available: bool) -> str:
    """Format status for display."""
    return "✓" if available else "✗"


def _format_version(version: str | None) -> str:
    return version if version else "unknown version"


@click.command("doctor")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def doctor_command(ctx: click.Context, json_output: bool) -> None:
    """Check that ffmpeg and ffprobe can be found.

    Exit codes: 0 when both tools resolve, 61 when either is missing.
    """
    config = resolve_config(ctx, ConfigSource(), json_output)
    report = check_tool_availability(config.tools)
    missing = [name for name, info in report.items() if not info.is_available]

    if json_output:
        echo_json(
            {
                "tools": {
                    name: {
                        "available": info.is_available,
                        "path": str(info.path) if info.path else None,
                        "version": info.version,
                    }
                    for name, info in report.items()
                },
                "missing": missing,
            }
        )
    else:
        click.echo("vshrink External Tool Health Check")
        click.echo("=" * 40)
        for name, info in report.items():
            status = _format_status(info.is_available)
            if info.is_available:
                click.echo(
                    f"  {status} {name}: {_format_version(info.version)} ({info.path})"
                )
            else:
                click.echo(f"  {status} {name}: not found")
                click.echo(f"    └─ {INSTALL_HINTS[name]}")
        click.echo()
        if missing:
            click.echo(f"Missing: {', '.join(missing)}")
        else:
            click.echo("All required tools are available.")

    if missing:
        sys.exit(ExitCode.CRITICAL)
    sys.exit(ExitCode.SUCCESS)
