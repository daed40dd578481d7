"""Encode job planning: budget + acceleration plan + output paths."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from vshrink.config.models import TranscodeSettings
from vshrink.domain.models import EncodeJob, StreamMetadata
from vshrink.planning.acceleration import (
    AccelerationPlan,
    select_acceleration_plan,
)
from vshrink.planning.budget import BitrateBudget, calculate_video_bitrate

PASSLOG_SUFFIX = "_ffmpeg2pass"


@dataclass(frozen=True)
class PlannedJob:
    """An encode job together with the numbers it was derived from."""

    job: EncodeJob
    budget: BitrateBudget
    plan: AccelerationPlan


def derive_output_path(source: Path, suffix: str) -> Path:
    """Sibling output path: ``movie.mkv`` -> ``movie_15GB.mkv``.

    Names without an extension get the suffix appended.
    """
    return source.with_name(f"{source.stem}{suffix}{source.suffix}")


def derive_log_file_base(source: Path) -> Path:
    """Pass log base for a source, unique per file in its directory.

    The full file name (extension included) is kept so ``a.mkv`` and
    ``a.mp4`` never share pass logs.
    """
    return source.with_name(f"{source.name}{PASSLOG_SUFFIX}")


def plan_encode_job(
    source_path: Path,
    metadata: StreamMetadata,
    settings: TranscodeSettings,
) -> PlannedJob:
    """Build the complete encode job for one source file.

    Raises:
        BudgetExhausted: If audio/subtitles alone exceed the target size.
    """
    budget = calculate_video_bitrate(
        settings.target_container_size_bytes,
        metadata.duration_seconds,
        metadata.audio_bitrate_bps,
        metadata.subtitle_bitrate_bps,
        settings.fallback_other_bitrate_bps,
    )

    plan = select_acceleration_plan(
        settings.accelerator,
        metadata.source_height,
        metadata.color_transfer,
        video_codec=metadata.video_codec,
    )

    job = EncodeJob(
        source_path=source_path,
        output_path=derive_output_path(source_path, settings.output_suffix),
        log_file_base=derive_log_file_base(source_path),
        target_video_bps=budget.video_bps,
        accelerator=plan.accelerator,
        filter_chain=plan.filter_chain,
        decode_flags=plan.decode_flags,
        video_codec=settings.video_codec,
        preset=settings.preset,
        low_confidence_budget=budget.low_confidence,
        duration_seconds=metadata.duration_seconds,
    )
    return PlannedJob(job=job, budget=budget, plan=plan)
