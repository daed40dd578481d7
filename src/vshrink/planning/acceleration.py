"""Hardware acceleration and filter chain selection.

One policy table keyed by AcceleratorClass replaces per-backend code paths.
Each profile knows how to decode on its hardware, how to tonemap HDR to SDR,
how to scale to 1080 lines and how to bring frames back to system memory for
the CPU encoder.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from vshrink.domain.models import (
    AcceleratorClass,
    ColorTransfer,
    FilterStage,
    StageKind,
)

MAX_OUTPUT_HEIGHT = 1080

# Assumed source codec when the probe reports none
DEFAULT_SOURCE_CODEC = "hevc"

# ffmpeg decoder names differ from the probed codec names for MPEG-1/2
QSV_DECODERS: Mapping[str, str] = {
    "h264": "h264_qsv",
    "hevc": "hevc_qsv",
    "av1": "av1_qsv",
    "vp8": "vp8_qsv",
    "vp9": "vp9_qsv",
    "mpeg2video": "mpeg2_qsv",
    "vc1": "vc1_qsv",
    "mjpeg": "mjpeg_qsv",
}

CUVID_DECODERS: Mapping[str, str] = {
    "h264": "h264_cuvid",
    "hevc": "hevc_cuvid",
    "av1": "av1_cuvid",
    "vp8": "vp8_cuvid",
    "vp9": "vp9_cuvid",
    "mpeg1video": "mpeg1_cuvid",
    "mpeg2video": "mpeg2_cuvid",
    "mpeg4": "mpeg4_cuvid",
    "vc1": "vc1_cuvid",
    "mjpeg": "mjpeg_cuvid",
}

# VAAPI selects the decoder itself; only the codec support matters
VAAPI_CODECS = frozenset({"h264", "hevc", "av1", "vp8", "vp9", "mpeg2video", "vc1"})

SOFTWARE_TONEMAP = (
    "libplacebo=tonemapping=auto:colorspace=bt709:color_primaries=bt709"
    ":color_trc=bt709:range=tv:format=yuv420p"
)

HW_DOWNLOAD = "hwdownload,format=yuv420p"


@dataclass(frozen=True)
class AccelerationProfile:
    """Filter and decode policy for one accelerator class."""

    hwaccel: tuple[str, ...]
    """Flags selecting the hardware decode API; empty for CPU decoding."""

    decoders: Mapping[str, str | None]
    """Source codec -> forced ``-c:v`` decoder, or None to let hwaccel pick."""

    tonemap: str
    scale: str
    download: str | None
    """Transfer back to system memory; None when frames never leave it."""

    def decode_flags(self, source_codec: str) -> tuple[str, ...] | None:
        """Decoder flags for a source codec, or None if it cannot be decoded."""
        if not self.hwaccel:
            return ()
        if source_codec not in self.decoders:
            return None
        decoder = self.decoders[source_codec]
        if decoder is None:
            return self.hwaccel
        return (*self.hwaccel, "-c:v", decoder)


ACCELERATION_PROFILES: dict[AcceleratorClass, AccelerationProfile] = {
    AcceleratorClass.NONE: AccelerationProfile(
        hwaccel=(),
        decoders={},
        tonemap=SOFTWARE_TONEMAP,
        scale=f"scale=-2:{MAX_OUTPUT_HEIGHT}",
        download=None,
    ),
    AcceleratorClass.INTEL: AccelerationProfile(
        hwaccel=("-hwaccel", "qsv"),
        decoders=QSV_DECODERS,
        tonemap="tonemap_qsv=format=p010",
        scale=f"scale_qsv=w=-2:h={MAX_OUTPUT_HEIGHT}",
        download=HW_DOWNLOAD,
    ),
    AcceleratorClass.AMD: AccelerationProfile(
        hwaccel=("-hwaccel", "vaapi", "-hwaccel_output_format", "vaapi"),
        decoders=dict.fromkeys(VAAPI_CODECS),
        tonemap="tonemap_vaapi=format=nv12",
        scale=f"scale_vaapi=w=-2:h={MAX_OUTPUT_HEIGHT}",
        download=HW_DOWNLOAD,
    ),
    AcceleratorClass.NVIDIA: AccelerationProfile(
        hwaccel=("-hwaccel", "cuda"),
        decoders=CUVID_DECODERS,
        tonemap="tonemap_cuda=tonemap=hable:format=yuv420p",
        scale=f"scale_cuda=w=-2:h={MAX_OUTPUT_HEIGHT}",
        download=HW_DOWNLOAD,
    ),
}


@dataclass(frozen=True)
class AccelerationPlan:
    """Decoder flags and ordered filter stages for one encode.

    ``accelerator`` is the path actually used, which is NONE when the
    requested hardware cannot decode the source.
    """

    accelerator: AcceleratorClass
    decode_flags: tuple[str, ...]
    filter_chain: tuple[FilterStage, ...]

    @property
    def filter_expression(self) -> str | None:
        return render_filter_chain(self.filter_chain)


def source_codec_name(video_codec: str | None) -> str:
    """Normalized probe codec name, defaulting to HEVC when unknown."""
    if video_codec and video_codec.strip():
        return video_codec.strip().casefold()
    return DEFAULT_SOURCE_CODEC


def select_acceleration_plan(
    accelerator: AcceleratorClass,
    source_height: int,
    color_transfer: ColorTransfer,
    *,
    video_codec: str | None = None,
) -> AccelerationPlan:
    """Select decode flags and the filter chain for a source.

    Stages are ordered tonemap, scale, download. The chain is empty for a
    CPU encode of an SDR source at 1080 lines or less. An UNKNOWN transfer
    is treated as SDR. A source codec the requested hardware has no decoder
    for is decoded and filtered on the CPU, since the hardware filters only
    accept hardware frames.
    """
    profile = ACCELERATION_PROFILES[accelerator]
    decode_flags = profile.decode_flags(source_codec_name(video_codec))
    if decode_flags is None:
        accelerator = AcceleratorClass.NONE
        profile = ACCELERATION_PROFILES[accelerator]
        decode_flags = ()

    stages: list[FilterStage] = []
    if color_transfer.is_hdr:
        stages.append(FilterStage(StageKind.TONEMAP, profile.tonemap))
    if source_height > MAX_OUTPUT_HEIGHT:
        stages.append(FilterStage(StageKind.SCALE, profile.scale))
    if profile.download is not None:
        stages.append(FilterStage(StageKind.DOWNLOAD, profile.download))

    return AccelerationPlan(
        accelerator=accelerator,
        decode_flags=decode_flags,
        filter_chain=tuple(stages),
    )


def render_filter_chain(stages: Sequence[FilterStage]) -> str | None:
    """Join stage expressions into a -vf argument, or None for no filters."""
    if not stages:
        return None
    return ",".join(stage.expression for stage in stages)


def describe_plan(accelerator: AcceleratorClass, plan: AccelerationPlan) -> str:
    """One-line human description of the acceleration path."""
    kinds = [stage.kind for stage in plan.filter_chain]
    parts = []
    if StageKind.TONEMAP in kinds:
        parts.append("tonemap")
    if StageKind.SCALE in kinds:
        parts.append(f"scale to {MAX_OUTPUT_HEIGHT}p")
    action = " + ".join(parts) if parts else "no filters"
    if accelerator is AcceleratorClass.NONE:
        return f"CPU ({action})"
    return f"{accelerator.value} hardware ({action})"
