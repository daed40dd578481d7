"""CLI command that shows the encode plan for one file without running it."""

import shlex
from pathlib import Path
from typing import Any

import click

from vshrink.cli.exit_codes import ExitCode
from vshrink.cli.options import accelerator_from_option, hwaccel_option, resolve_config
from vshrink.cli.output import echo_json, error_exit
from vshrink.config import ConfigSource
from vshrink.core.formatting import format_bitrate, format_gib
from vshrink.domain.models import StreamMetadata
from vshrink.exceptions import BudgetExhausted, ProbeError, ToolNotFoundError
from vshrink.executor import EncodeCommandBuilder
from vshrink.introspector import FFprobeIntrospector
from vshrink.planning import PlannedJob, describe_plan, plan_encode_job
from vshrink.tools import get_tool_path, require_tool


def _plan_to_dict(
    file: Path,
    metadata: StreamMetadata,
    planned: PlannedJob,
    pass1: list[str],
    pass2: list[str],
) -> dict[str, Any]:
    job = planned.job
    return {
        "file": str(file),
        "duration_seconds": metadata.duration_seconds,
        "source_height": metadata.source_height,
        "hdr": metadata.is_hdr,
        "other_bitrate_bps": planned.budget.other_bps,
        "low_confidence": planned.budget.low_confidence,
        "target_video_bps": job.target_video_bps,
        "accelerator": job.accelerator.value,
        "filter_chain": planned.plan.filter_expression,
        "output": str(job.output_path),
        "commands": {
            "pass1": pass1,
            "pass2": pass2,
        },
    }


@click.command("plan")
@click.argument("file", type=click.Path(path_type=Path))
@hwaccel_option
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Output in JSON format.",
)
@click.pass_context
def plan_command(
    ctx: click.Context,
    file: Path,
    hwaccel: str | None,
    json_output: bool,
) -> None:
    """Probe FILE and print its bitrate budget and both ffmpeg commands.

    Nothing is encoded, moved or deleted.
    """
    if not file.is_file():
        error_exit(f"File not found: {file}", ExitCode.TARGET_NOT_FOUND, json_output)

    config = resolve_config(
        ctx,
        ConfigSource(accelerator=accelerator_from_option(hwaccel)),
        json_output,
    )

    try:
        ffprobe_path = require_tool("ffprobe", config.tools)
    except ToolNotFoundError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)

    try:
        metadata = FFprobeIntrospector(ffprobe_path).get_metadata(file)
    except ProbeError as e:
        error_exit(str(e), ExitCode.PROBE_FAILED, json_output)

    try:
        planned = plan_encode_job(file, metadata, config.transcode)
    except BudgetExhausted as e:
        error_exit(str(e), ExitCode.BUDGET_EXHAUSTED, json_output)

    # The commands are only rendered here, so a missing ffmpeg is not fatal
    ffmpeg_path = get_tool_path("ffmpeg", config.tools) or "ffmpeg"
    builder = EncodeCommandBuilder(ffmpeg_path)
    job = planned.job
    pass1 = builder.build_args(job, 1)
    pass2 = builder.build_args(job, 2, job.output_path)

    if json_output:
        echo_json(_plan_to_dict(file, metadata, planned, pass1, pass2))
        return

    click.echo(f"File: {file}")
    click.echo(f"  Size: {format_gib(file.stat().st_size)}")
    click.echo(f"  Duration: {metadata.duration_seconds}s")
    click.echo(
        f"  Video: {metadata.source_height}p "
        f"{'HDR' if metadata.is_hdr else 'SDR'} ({metadata.video_codec or 'unknown'})"
    )
    other = format_bitrate(planned.budget.other_bps)
    if planned.budget.low_confidence:
        other += " (not detected, safety buffer applied)"
    click.echo(f"  Audio/subtitle bitrate: {other}")
    click.echo(f"  Target video bitrate: {format_bitrate(job.target_video_bps)}")
    click.echo(f"  Acceleration: {describe_plan(job.accelerator, planned.plan)}")
    click.echo(f"  Filter chain: {planned.plan.filter_expression or '(none)'}")
    click.echo(f"  Output: {job.output_path}")
    click.echo("")
    click.echo("Pass 1:")
    click.echo(f"  {shlex.join(pass1)}")
    click.echo("Pass 2:")
    click.echo(f"  {shlex.join(pass2)}")
