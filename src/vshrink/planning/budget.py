"""Video bitrate budget calculation.

The container budget is split between the copied audio/subtitle streams and
the re-encoded video stream:

    video_bps = (target_bytes * 8 - other_bps * duration) // duration

Everything here is pure integer arithmetic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from vshrink.exceptions import BudgetExhausted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BitrateBudget:
    """Result of a budget calculation."""

    video_bps: int
    other_bps: int
    """Bitrate reserved for audio and subtitles (after fallback substitution)."""

    low_confidence: bool
    """True when the fallback was used because no stream bitrate was detected."""

    total_bits: int

    @property
    def video_kbps(self) -> int:
        return self.video_bps // 1000


def round_duration_seconds(duration: Decimal | float | str) -> int:
    """Round a probe duration to whole seconds, halves rounding up.

    Accepts the raw string ffprobe reports so no binary float error creeps
    in before rounding ("5.5" -> 6, "7199.5" -> 7200).
    """
    value = Decimal(str(duration))
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def calculate_video_bitrate(
    target_container_size_bytes: int,
    duration_seconds: int,
    audio_bitrate_bps: int,
    subtitle_bitrate_bps: int,
    fallback_other_bitrate_bps: int,
) -> BitrateBudget:
    """Compute the video bitrate that fills the target container size.

    Args:
        target_container_size_bytes: Desired output file size.
        duration_seconds: Whole-second duration (> 0).
        audio_bitrate_bps: Sum of detected audio bitrates (0 = unknown).
        subtitle_bitrate_bps: Sum of detected subtitle bitrates (0 = unknown).
        fallback_other_bitrate_bps: Used when no bitrate was detected at all.

    Returns:
        BitrateBudget with the video bitrate in bits per second.

    Raises:
        ValueError: If duration_seconds is not positive.
        BudgetExhausted: If the non-video streams leave no room for video.
    """
    if duration_seconds <= 0:
        raise ValueError(f"duration_seconds must be positive, got {duration_seconds}")

    other_bps = audio_bitrate_bps + subtitle_bitrate_bps
    low_confidence = False
    if other_bps == 0:
        other_bps = fallback_other_bitrate_bps
        low_confidence = True
        logger.warning(
            "Could not detect audio/subtitle bitrate, using fallback %d kbps",
            fallback_other_bitrate_bps // 1000,
            extra={"fallback_other_bitrate_bps": fallback_other_bitrate_bps},
        )

    total_bits = target_container_size_bytes * 8
    video_bps = (total_bits - other_bps * duration_seconds) // duration_seconds

    if video_bps <= 0:
        raise BudgetExhausted(total_bits, other_bps, duration_seconds)

    return BitrateBudget(
        video_bps=video_bps,
        other_bps=other_bps,
        low_confidence=low_confidence,
        total_bits=total_bits,
    )
