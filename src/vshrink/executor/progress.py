"""Parsing of ffmpeg's stderr status lines.

A status line looks like::

    frame= 1234 fps= 30 q=28.0 time=00:01:23.45 bitrate=5000kbits/s speed=2.0x

Fields are read independently because ffmpeg omits or pads them freely.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

_FIELD = re.compile(r"(frame|fps|time|bitrate|speed)=\s*(\S+)")
_CLOCK = re.compile(r"^(\d+):(\d{2}):(\d{2}(?:\.\d+)?)$")


@dataclass
class FFmpegProgress:
    frame: int | None = None
    fps: float | None = None
    bitrate: str | None = None
    speed: str | None = None
    out_time_seconds: float | None = None

    def get_percent(self, duration_seconds: float | None) -> float:
        """Share of ``duration_seconds`` encoded so far, capped at 100."""
        if not duration_seconds or duration_seconds <= 0:
            return 0.0
        if self.out_time_seconds is None:
            return 0.0
        return min(100.0, self.out_time_seconds / duration_seconds * 100)


def _clock_seconds(value: str) -> float | None:
    match = _CLOCK.match(value)
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return round(int(hours) * 3600 + int(minutes) * 60 + float(seconds), 3)


def _number(value: str, convert: Callable[[str], T]) -> T | None:
    try:
        return convert(value)
    except ValueError:
        return None


def parse_stderr_progress(line: str) -> FFmpegProgress | None:
    """Return the parsed status line, or None for any other stderr output."""
    if "frame=" not in line:
        return None

    fields = dict(_FIELD.findall(line))
    progress = FFmpegProgress()
    if "frame" in fields:
        progress.frame = _number(fields["frame"], int)
    if "fps" in fields:
        progress.fps = _number(fields["fps"], float)
    if "time" in fields:
        progress.out_time_seconds = _clock_seconds(fields["time"])
    for key in ("bitrate", "speed"):
        if fields.get(key, "N/A") != "N/A":
            setattr(progress, key, fields[key])
    return progress
