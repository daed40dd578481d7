"""Configuration data models.

This module defines dataclasses for vshrink configuration options.
TranscodeSettings is the immutable value handed to the planner; the other
sections only affect the surrounding tooling.
"""

from dataclasses import dataclass, field
from pathlib import Path

from vshrink.domain.models import AcceleratorClass

# 15 GiB
DEFAULT_TARGET_SIZE_BYTES = 16_106_127_360

# 21 GiB - 1 byte: files strictly larger than this are converted
DEFAULT_SIZE_THRESHOLD_BYTES = 22_548_578_303

# Safety buffer for audio/subtitles whose bitrate ffprobe cannot report
# (TrueHD, PCM). 8000 kbps covers lossless HD audio.
DEFAULT_FALLBACK_OTHER_BITRATE_BPS = 8_000_000

DEFAULT_VIDEO_EXTENSIONS = (".mkv", ".mp4", ".avi", ".mov")


@dataclass(frozen=True)
class TranscodeSettings:
    """Settings consumed by the budget calculator, planner and orchestrator."""

    target_container_size_bytes: int = DEFAULT_TARGET_SIZE_BYTES
    size_threshold_bytes: int = DEFAULT_SIZE_THRESHOLD_BYTES

    video_codec: str = "libx265"
    """CPU encoder used for the final encode."""

    preset: str = "medium"
    fallback_other_bitrate_bps: int = DEFAULT_FALLBACK_OTHER_BITRATE_BPS
    accelerator: AcceleratorClass = AcceleratorClass.NONE

    output_suffix: str = "_15GB"
    """Appended to the source stem to build the output filename."""

    min_output_bytes: int = 1024
    """Outputs of this size or smaller fail verification."""

    extensions: tuple[str, ...] = DEFAULT_VIDEO_EXTENSIONS

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.target_container_size_bytes <= 0:
            raise ValueError(
                "target_container_size_bytes must be positive, "
                f"got {self.target_container_size_bytes}"
            )
        if self.size_threshold_bytes < 0:
            raise ValueError(
                "size_threshold_bytes must not be negative, "
                f"got {self.size_threshold_bytes}"
            )
        if self.fallback_other_bitrate_bps <= 0:
            raise ValueError(
                "fallback_other_bitrate_bps must be positive, "
                f"got {self.fallback_other_bitrate_bps}"
            )
        if not self.video_codec:
            raise ValueError("video_codec must not be empty")
        if not self.preset:
            raise ValueError("preset must not be empty")
        if not self.output_suffix:
            raise ValueError("output_suffix must not be empty")


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class ProcessingConfig:
    """Configuration for batch processing behavior."""

    workers: int = 1
    """Number of files converted in parallel (1 = sequential)."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class VShrinkConfig:
    """Main configuration container."""

    transcode: TranscodeSettings = field(default_factory=TranscodeSettings)
    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
