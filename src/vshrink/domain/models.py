"""Core data types shared by the planner, the orchestrator and the batch driver.

All types here are immutable. StreamMetadata is produced by the probe layer,
EncodeJob by the planner and JobOutcome by the orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ColorTransfer(Enum):
    """Color transfer characteristic of the primary video stream."""

    SDR = "sdr"
    """Standard dynamic range (bt709, bt601, gamma curves, ...)."""

    PQ = "pq"
    """Perceptual quantizer, HDR10 (smpte2084)."""

    HLG = "hlg"
    """Hybrid log-gamma (arib-std-b67)."""

    UNKNOWN = "unknown"
    """Not reported by the probe. Treated as SDR."""

    @property
    def is_hdr(self) -> bool:
        """True for transfer functions that need tonemapping to SDR."""
        return self in (ColorTransfer.PQ, ColorTransfer.HLG)


class AcceleratorClass(Enum):
    """Hardware used for decoding and filtering.

    The final encode always runs on the CPU.
    """

    NONE = "none"
    INTEL = "intel"
    AMD = "amd"
    NVIDIA = "nvidia"

    @classmethod
    def from_name(cls, name: str | None) -> AcceleratorClass:
        """Parse an accelerator name; empty or None means CPU only.

        Raises:
            ValueError: If the name is not a known accelerator.
        """
        if not name:
            return cls.NONE
        try:
            return cls(name.strip().casefold())
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Invalid hardware type '{name}'. Must be one of: {valid}"
            ) from None


class DispositionAction(Enum):
    """What happens to the original file after a verified conversion."""

    DELETE = "delete"
    MOVE = "move"
    DRYRUN = "dryrun"


class StageKind(Enum):
    """Kind of a filter chain stage."""

    TONEMAP = "tonemap"
    SCALE = "scale"
    DOWNLOAD = "download"


@dataclass(frozen=True)
class FilterStage:
    """One stage of the video filter chain."""

    kind: StageKind
    expression: str
    """ffmpeg filter expression (may contain several comma-joined filters)."""


@dataclass(frozen=True)
class StreamMetadata:
    """Normalized probe result for one file.

    Bitrates of 0 mean the probe could not detect them, not that the streams
    are absent or silent.
    """

    duration_seconds: int
    """Duration rounded half-up to whole seconds."""

    audio_bitrate_bps: int
    subtitle_bitrate_bps: int
    source_height: int
    color_transfer: ColorTransfer = ColorTransfer.UNKNOWN

    video_codec: str | None = None
    source_width: int | None = None
    audio_stream_count: int = 0
    subtitle_stream_count: int = 0
    raw_duration_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.duration_seconds <= 0:
            raise ValueError(
                f"duration_seconds must be positive, got {self.duration_seconds}"
            )
        if self.audio_bitrate_bps < 0 or self.subtitle_bitrate_bps < 0:
            raise ValueError("stream bitrates must not be negative")
        if self.source_height <= 0:
            raise ValueError(
                f"source_height must be positive, got {self.source_height}"
            )

    @property
    def is_hdr(self) -> bool:
        return self.color_transfer.is_hdr

    @property
    def other_bitrate_bps(self) -> int:
        """Combined bitrate of the streams copied alongside the video."""
        return self.audio_bitrate_bps + self.subtitle_bitrate_bps


@dataclass(frozen=True)
class EncodeJob:
    """Everything needed to run one two-pass encode on a given backend.

    Constructing a job with a non-positive bitrate raises ValueError, so a
    job that could never produce a valid encode cannot be handed on.
    """

    source_path: Path
    output_path: Path
    log_file_base: Path
    target_video_bps: int
    accelerator: AcceleratorClass
    filter_chain: tuple[FilterStage, ...] = ()
    decode_flags: tuple[str, ...] = ()
    video_codec: str = "libx265"
    preset: str = "medium"
    low_confidence_budget: bool = False
    duration_seconds: int | None = None

    def __post_init__(self) -> None:
        if self.target_video_bps <= 0:
            raise ValueError(
                f"target_video_bps must be positive, got {self.target_video_bps}"
            )

    @property
    def target_video_kbps(self) -> int:
        return self.target_video_bps // 1000


class OrchestratorState(Enum):
    """States of the two-pass orchestration state machine."""

    PLANNED = "planned"
    PASS1_RUNNING = "pass1_running"
    PASS1_DONE = "pass1_done"
    PASS1_FAILED = "pass1_failed"
    PASS2_RUNNING = "pass2_running"
    PASS2_DONE = "pass2_done"
    PASS2_FAILED = "pass2_failed"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    VERIFY_FAILED = "verify_failed"
    DISPOSING = "disposing"
    COMPLETE = "complete"
    DISPOSE_FAILED = "dispose_failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {
        OrchestratorState.PASS1_FAILED,
        OrchestratorState.PASS2_FAILED,
        OrchestratorState.VERIFY_FAILED,
        OrchestratorState.COMPLETE,
        OrchestratorState.DISPOSE_FAILED,
    }
)


class OutcomeKind(Enum):
    SKIPPED = "skipped"
    CONVERTED = "converted"
    FAILED = "failed"


@dataclass(frozen=True)
class JobOutcome:
    """Final result for one candidate file."""

    source_path: Path
    kind: OutcomeKind
    reason: str | None = None
    stage: OrchestratorState | None = None
    """Terminal state a failure ended in (None for failures before planning)."""

    output_path: Path | None = None
    states: tuple[OrchestratorState, ...] = field(default=())
    elapsed_seconds: float = 0.0

    @classmethod
    def skipped(
        cls,
        source_path: Path,
        reason: str,
        states: tuple[OrchestratorState, ...] = (),
    ) -> JobOutcome:
        return cls(
            source_path=source_path,
            kind=OutcomeKind.SKIPPED,
            reason=reason,
            states=states,
        )

    @classmethod
    def converted(
        cls,
        source_path: Path,
        output_path: Path,
        states: tuple[OrchestratorState, ...] = (),
        elapsed_seconds: float = 0.0,
    ) -> JobOutcome:
        return cls(
            source_path=source_path,
            kind=OutcomeKind.CONVERTED,
            output_path=output_path,
            states=states,
            elapsed_seconds=elapsed_seconds,
        )

    @classmethod
    def failed(
        cls,
        source_path: Path,
        stage: OrchestratorState | None,
        reason: str,
        output_path: Path | None = None,
        states: tuple[OrchestratorState, ...] = (),
        elapsed_seconds: float = 0.0,
    ) -> JobOutcome:
        return cls(
            source_path=source_path,
            kind=OutcomeKind.FAILED,
            reason=reason,
            stage=stage,
            output_path=output_path,
            states=states,
            elapsed_seconds=elapsed_seconds,
        )

    @property
    def final_state(self) -> OrchestratorState | None:
        return self.states[-1] if self.states else None

    @property
    def status_label(self) -> str:
        if self.kind == OutcomeKind.CONVERTED:
            return "OK"
        if self.kind == OutcomeKind.SKIPPED:
            return "SKIP"
        return "FAILED"
