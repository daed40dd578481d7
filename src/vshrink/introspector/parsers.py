"""Pure parsing functions for ffprobe JSON output.

These functions transform ffprobe JSON data into StreamMetadata.
All functions are pure (no I/O, no side effects) for easy testing.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from vshrink.domain.models import ColorTransfer, StreamMetadata
from vshrink.exceptions import ProbeError
from vshrink.planning.budget import round_duration_seconds

logger = logging.getLogger(__name__)

# ffprobe color_transfer values for HDR transfer functions
_TRANSFER_MAP = {
    "smpte2084": ColorTransfer.PQ,
    "arib-std-b67": ColorTransfer.HLG,
}

# Matroska statistics tags written by mkvmerge, checked when bit_rate is absent
_BITRATE_TAGS = ("BPS", "BPS-eng", "BPS-ENG")


def map_color_transfer(value: str | None) -> ColorTransfer:
    """Map an ffprobe color_transfer string to ColorTransfer."""
    if not value or value == "unknown":
        return ColorTransfer.UNKNOWN
    return _TRANSFER_MAP.get(value.casefold(), ColorTransfer.SDR)


def parse_bitrate(value: Any) -> int | None:
    """Parse a bit rate value ("640000", 640000, "640000.0") into bps."""
    if value is None or isinstance(value, bool):
        return None
    try:
        bps = int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError, OverflowError):
        return None
    return bps if bps > 0 else None


def stream_bitrate(stream: dict[str, Any]) -> int:
    """Bit rate of one stream in bps, 0 when it cannot be determined.

    Falls back to the Matroska ``BPS`` statistics tags, which is where
    mkvmerge records the bit rate of streams ffprobe reports no bit_rate for.
    """
    bps = parse_bitrate(stream.get("bit_rate"))
    if bps is not None:
        return bps

    tags = stream.get("tags") or {}
    for tag in _BITRATE_TAGS:
        bps = parse_bitrate(tags.get(tag))
        if bps is not None:
            return bps
    return 0


def parse_duration(value: Any) -> Decimal | None:
    """Parse a duration string from ffprobe ("7199.5") into seconds."""
    if value is None or value == "N/A":
        return None
    try:
        duration = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return duration if duration.is_finite() else None


def parse_ffprobe_output(path: Path, data: dict[str, Any]) -> StreamMetadata:
    """Build StreamMetadata from ffprobe ``-show_streams -show_format`` JSON.

    Args:
        path: File the data describes (used in messages only).
        data: Parsed ffprobe JSON.

    Returns:
        StreamMetadata for the first video stream and the summed
        audio/subtitle bitrates.

    Raises:
        ProbeError: If there is no video stream, or the duration or the
            video height is missing or not positive.
    """
    streams = data.get("streams") or []
    fmt = data.get("format") or {}

    video_streams = [s for s in streams if s.get("codec_type") == "video"]
    if not video_streams:
        raise ProbeError(f"No video stream found in {path}")
    video = video_streams[0]

    audio_streams = [s for s in streams if s.get("codec_type") == "audio"]
    subtitle_streams = [s for s in streams if s.get("codec_type") == "subtitle"]

    raw_duration = parse_duration(fmt.get("duration"))
    if raw_duration is None:
        raw_duration = parse_duration(video.get("duration"))
    if raw_duration is None:
        raise ProbeError(f"Could not get video duration for {path}")

    duration_seconds = round_duration_seconds(raw_duration)
    if duration_seconds <= 0:
        raise ProbeError(f"Video duration is zero for {path}: {raw_duration}s")

    height = video.get("height")
    if not isinstance(height, int) or height <= 0:
        raise ProbeError(f"Could not get video height for {path}")

    width = video.get("width")
    if not isinstance(width, int) or width <= 0:
        width = None

    audio_bps = sum(stream_bitrate(s) for s in audio_streams)
    subtitle_bps = sum(stream_bitrate(s) for s in subtitle_streams)

    return StreamMetadata(
        duration_seconds=duration_seconds,
        audio_bitrate_bps=audio_bps,
        subtitle_bitrate_bps=subtitle_bps,
        source_height=height,
        color_transfer=map_color_transfer(video.get("color_transfer")),
        video_codec=video.get("codec_name"),
        source_width=width,
        audio_stream_count=len(audio_streams),
        subtitle_stream_count=len(subtitle_streams),
        raw_duration_seconds=float(raw_duration),
    )
