"""CLI command that converts every oversized video under a directory."""

import logging
import sys
import threading
from pathlib import Path

import click

from vshrink.cli.exit_codes import ExitCode
from vshrink.cli.options import (
    SIZE,
    accelerator_from_option,
    hwaccel_option,
    resolve_config,
)
from vshrink.cli.output import echo_json, error_exit
from vshrink.config import ConfigSource
from vshrink.core.formatting import format_gib
from vshrink.domain.models import AcceleratorClass, DispositionAction, JobOutcome
from vshrink.exceptions import ToolNotFoundError
from vshrink.executor import DispositionExecutor, FFmpegEncoder, TwoPassOrchestrator
from vshrink.introspector import FFprobeIntrospector
from vshrink.jobs import BatchDriver, BatchSummary
from vshrink.scanner import discover_candidates
from vshrink.tools import require_tool

logger = logging.getLogger(__name__)


def _format_outcome(outcome: JobOutcome) -> str:
    line = f"[{outcome.status_label}] {outcome.source_path.name}"
    if outcome.output_path is not None and outcome.reason is None:
        return f"{line} -> {outcome.output_path.name}"
    if outcome.reason:
        return f"{line}: {outcome.reason}"
    return line


def _echo_outcome(outcome: JobOutcome) -> None:
    click.echo(_format_outcome(outcome))


def _echo_header(
    directory: Path,
    action: DispositionAction,
    backup_root: Path | None,
    accelerator: AcceleratorClass,
    threshold_bytes: int,
) -> None:
    click.echo(f"Directory: {directory}")
    click.echo(f"Action: {action.value}")
    if backup_root is not None:
        click.echo(f"Move to: {backup_root}")
    if accelerator is AcceleratorClass.NONE:
        click.echo("Acceleration: CPU")
    else:
        click.echo(f"Acceleration: {accelerator.value}")
    click.echo(f"Converting files larger than {format_gib(threshold_bytes)}")
    click.echo("")


def _echo_summary(summary: BatchSummary) -> None:
    click.echo("")
    duration = summary.elapsed_seconds
    duration_str = f" in {duration:.1f}s" if duration > 0 else ""
    click.echo(
        f"Processed {len(summary.outcomes)} file(s): "
        f"{summary.converted} converted, {summary.skipped} skipped, "
        f"{summary.failed} failed{duration_str}"
    )
    if summary.interrupted:
        click.echo(f"(Interrupted: {summary.not_started} file(s) not started)")


def _prepare_move_dir(move_dir: Path, json_output: bool) -> Path:
    try:
        move_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        error_exit(
            f"Cannot create move directory {move_dir}: {e}",
            ExitCode.OPERATION_FAILED,
            json_output,
        )
    return move_dir.resolve()


@click.command("convert")
@click.argument("directory", type=click.Path(path_type=Path))
@click.option(
    "--action",
    type=click.Choice([action.value for action in DispositionAction]),
    required=True,
    help="What to do with each original after a verified conversion.",
)
@click.option(
    "--move-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Destination for originals with --action move (created if missing).",
)
@hwaccel_option
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Files to convert in parallel (default: 1).",
)
@click.option(
    "--target-size",
    type=SIZE,
    default=None,
    help="Target container size, e.g. 15GiB (default: 15GiB).",
)
@click.option(
    "--min-size",
    type=SIZE,
    default=None,
    help="Only convert files strictly larger than this (default: 21GiB - 1 byte).",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Output a JSON report instead of status lines.",
)
@click.pass_context
def convert_command(
    ctx: click.Context,
    directory: Path,
    action: str,
    move_dir: Path | None,
    hwaccel: str | None,
    workers: int | None,
    target_size: int | None,
    min_size: int | None,
    json_output: bool,
) -> None:
    """Re-encode every video under DIRECTORY that exceeds the size limit.

    Each file gets a two-pass encode sized to the target. The original is
    deleted, moved or kept (dryrun) only after the output is verified.

    Examples:

        vshrink convert /media/movies --action dryrun

        vshrink convert /media/movies --action move --move-dir /backup

        vshrink convert /media/movies --action delete --hwaccel nvidia
    """
    disposition = DispositionAction(action)
    if disposition is DispositionAction.MOVE and move_dir is None:
        error_exit(
            "--move-dir is required with --action move",
            ExitCode.INVALID_ARGUMENTS,
            json_output,
        )
    if not directory.is_dir():
        error_exit(
            f"Directory not found: {directory}",
            ExitCode.TARGET_NOT_FOUND,
            json_output,
        )

    config = resolve_config(
        ctx,
        ConfigSource(
            target_size_bytes=target_size,
            size_threshold_bytes=min_size,
            accelerator=accelerator_from_option(hwaccel),
            processing_workers=workers,
        ),
        json_output,
    )
    settings = config.transcode

    try:
        ffmpeg_path = require_tool("ffmpeg", config.tools)
        ffprobe_path = require_tool("ffprobe", config.tools)
    except ToolNotFoundError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)

    backup_root = None
    if disposition is DispositionAction.MOVE:
        backup_root = _prepare_move_dir(move_dir, json_output)

    if not json_output:
        _echo_header(
            directory,
            disposition,
            backup_root,
            settings.accelerator,
            settings.size_threshold_bytes,
        )

    candidates = discover_candidates(
        directory,
        min_size_bytes=settings.size_threshold_bytes,
        extensions=settings.extensions,
    )
    if not candidates and not json_output:
        click.echo(
            f"No files larger than {format_gib(settings.size_threshold_bytes)} found."
        )

    stop_event = threading.Event()
    encoder = FFmpegEncoder(ffmpeg_path)
    orchestrator = TwoPassOrchestrator(
        encoder,
        DispositionExecutor(),
        action=disposition,
        backup_root=backup_root,
        min_output_bytes=settings.min_output_bytes,
        cancel_event=stop_event,
    )
    driver = BatchDriver(
        FFprobeIntrospector(ffprobe_path),
        orchestrator,
        settings,
        workers=config.processing.workers,
        encoder=encoder,
        stop_event=stop_event,
        on_outcome=None if json_output else _echo_outcome,
    )

    summary = driver.run(candidates)

    if json_output:
        echo_json(
            {
                "directory": str(directory),
                "action": disposition.value,
                "move_dir": str(backup_root) if backup_root else None,
                "accelerator": settings.accelerator.value,
                "workers": config.processing.workers,
                **summary.to_dict(),
            }
        )
    elif candidates:
        _echo_summary(summary)

    if summary.interrupted:
        sys.exit(ExitCode.INTERRUPTED)
    if summary.has_failures:
        sys.exit(ExitCode.OPERATION_FAILED)
    sys.exit(ExitCode.SUCCESS)
