"""FFmpeg command building for two-pass encodes.

The command is assembled from ordered sections so each concern (decoding,
stream mapping, rate control, filtering, pass bookkeeping) is built in one
place and the final argument order is always the same:

    global, decode, input, mapping, codec/bitrate, filter, pass, output
"""

from __future__ import annotations

import platform
import re
from dataclasses import dataclass, field
from pathlib import Path

from vshrink.domain.models import EncodeJob
from vshrink.planning.acceleration import render_filter_chain

GLOBAL_ARGS = ("-y", "-nostdin", "-hide_banner")

# Characters with meaning inside an ffmpeg key=value:key=value option string
_OPTION_SPECIAL = re.compile(r"([\\':=])")


def null_device() -> str:
    """Null sink for the analysis pass: NUL on Windows, /dev/null elsewhere."""
    return "NUL" if platform.system() == "Windows" else "/dev/null"


def escape_option_value(value: str) -> str:
    """Backslash-escape a value for an ffmpeg ``key=value:...`` option list.

    ``-x265-params`` splits on ``:`` and ``=``, strips ``'`` quotes and
    consumes backslashes, so file names such as ``Alien: Romulus.mkv`` or
    ``Schindler's List.mkv`` must be escaped to reach x265 intact.
    """
    return _OPTION_SPECIAL.sub(r"\\\1", value)


def build_pass_args(
    video_codec: str, pass_number: int, log_file_base: Path
) -> list[str]:
    """Two-pass bookkeeping arguments for an encoder.

    libx265 takes its pass settings through ``-x265-params``; every other
    encoder uses ffmpeg's generic ``-pass``/``-passlogfile``.
    """
    if video_codec == "libx265":
        stats = escape_option_value(f"{log_file_base}.log")
        return ["-x265-params", f"pass={pass_number}:stats={stats}"]
    return ["-pass", str(pass_number), "-passlogfile", str(log_file_base)]


@dataclass
class EncodeCommand:
    """Ordered argument sections of one ffmpeg invocation."""

    executable: str
    global_args: list[str] = field(default_factory=list)
    decode: list[str] = field(default_factory=list)
    input: list[str] = field(default_factory=list)
    mapping: list[str] = field(default_factory=list)
    codec: list[str] = field(default_factory=list)
    filter: list[str] = field(default_factory=list)
    passes: list[str] = field(default_factory=list)
    output: list[str] = field(default_factory=list)

    def to_args(self) -> list[str]:
        return [
            self.executable,
            *self.global_args,
            *self.decode,
            *self.input,
            *self.mapping,
            *self.codec,
            *self.filter,
            *self.passes,
            *self.output,
        ]


class EncodeCommandBuilder:
    """Builds pass 1 and pass 2 ffmpeg commands for an EncodeJob."""

    def __init__(self, ffmpeg_path: Path | str = "ffmpeg") -> None:
        self._ffmpeg_path = str(ffmpeg_path)

    def build(
        self, job: EncodeJob, pass_number: int, output: Path | None = None
    ) -> EncodeCommand:
        """Build the command for one pass.

        With no output the run analyses video only and writes to the null
        device. With an output it uses identical decode, filter and rate
        settings, copies audio and subtitles, and writes that file.

        Raises:
            ValueError: If pass_number is not 1 or 2.
        """
        if pass_number not in (1, 2):
            raise ValueError(f"pass_number must be 1 or 2, got {pass_number}")

        command = EncodeCommand(executable=self._ffmpeg_path)
        command.global_args = list(GLOBAL_ARGS)
        command.decode = list(job.decode_flags)
        command.input = ["-i", str(job.source_path)]

        if output is None:
            command.mapping = ["-map", "0:v:0", "-an", "-sn"]
        else:
            command.mapping = [
                "-map",
                "0:v:0",
                "-map",
                "0:a?",
                "-map",
                "0:s?",
                "-c:a",
                "copy",
                "-c:s",
                "copy",
            ]

        command.codec = [
            "-c:v",
            job.video_codec,
            "-preset",
            job.preset,
            "-b:v",
            str(job.target_video_bps),
        ]

        vf = render_filter_chain(job.filter_chain)
        if vf:
            command.filter = ["-vf", vf]

        command.passes = build_pass_args(
            job.video_codec, pass_number, job.log_file_base
        )

        if output is None:
            command.output = ["-f", "null", null_device()]
        else:
            command.output = [str(output)]

        return command

    def build_args(
        self, job: EncodeJob, pass_number: int, output: Path | None = None
    ) -> list[str]:
        return self.build(job, pass_number, output).to_args()
