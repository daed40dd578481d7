"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building VShrinkConfig by composing
multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from vshrink.config.env import EnvReader
from vshrink.config.file_models import ConfigFileModel
from vshrink.config.models import (
    DEFAULT_FALLBACK_OTHER_BITRATE_BPS,
    DEFAULT_SIZE_THRESHOLD_BYTES,
    DEFAULT_TARGET_SIZE_BYTES,
    LoggingConfig,
    ProcessingConfig,
    ToolPathsConfig,
    TranscodeSettings,
    VShrinkConfig,
)
from vshrink.domain.models import AcceleratorClass


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Transcode settings
    target_size_bytes: int | None = None
    size_threshold_bytes: int | None = None
    video_codec: str | None = None
    preset: str | None = None
    fallback_other_bitrate_bps: int | None = None
    accelerator: AcceleratorClass | None = None
    output_suffix: str | None = None
    min_output_bytes: int | None = None

    # Tool paths
    ffmpeg_path: Path | None = None
    ffprobe_path: Path | None = None

    # Processing config
    processing_workers: int | None = None

    # Logging config
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds VShrinkConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_model))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build()
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply configuration source, overriding existing values.

        Non-None values from the source override existing values.
        None values are ignored (preserve existing).
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> VShrinkConfig:
        """Build the final VShrinkConfig with defaults for unset values.

        Raises:
            ValueError: If a merged value fails model validation.
        """
        transcode = TranscodeSettings(
            target_container_size_bytes=self._get(
                "target_size_bytes", DEFAULT_TARGET_SIZE_BYTES
            ),
            size_threshold_bytes=self._get(
                "size_threshold_bytes", DEFAULT_SIZE_THRESHOLD_BYTES
            ),
            video_codec=self._get("video_codec", "libx265"),
            preset=self._get("preset", "medium"),
            fallback_other_bitrate_bps=self._get(
                "fallback_other_bitrate_bps", DEFAULT_FALLBACK_OTHER_BITRATE_BPS
            ),
            accelerator=self._get("accelerator", AcceleratorClass.NONE),
            output_suffix=self._get("output_suffix", "_15GB"),
            min_output_bytes=self._get("min_output_bytes", 1024),
        )

        tools = ToolPathsConfig(
            ffmpeg=self._get("ffmpeg_path", None),
            ffprobe=self._get("ffprobe_path", None),
        )

        processing = ProcessingConfig(
            workers=self._get("processing_workers", 1),
        )

        logging_config = LoggingConfig(
            level=self._get("logging_level", "info"),
            file=self._get("logging_file", None),
            format=self._get("logging_format", "text"),
            include_stderr=self._get("logging_include_stderr", False),
            max_bytes=self._get("logging_max_bytes", 10_485_760),
            backup_count=self._get("logging_backup_count", 5),
        )

        return VShrinkConfig(
            transcode=transcode,
            tools=tools,
            processing=processing,
            logging=logging_config,
        )


def source_from_file(file_config: ConfigFileModel) -> ConfigSource:
    """Create ConfigSource from a validated config file model."""
    transcode = file_config.transcode
    tools = file_config.tools
    logging_conf = file_config.logging

    return ConfigSource(
        # Transcode
        target_size_bytes=transcode.target_size,
        size_threshold_bytes=transcode.size_threshold,
        video_codec=transcode.video_codec,
        preset=transcode.preset,
        fallback_other_bitrate_bps=transcode.fallback_other_bitrate,
        accelerator=(
            AcceleratorClass.from_name(transcode.hwaccel)
            if transcode.hwaccel is not None
            else None
        ),
        output_suffix=transcode.output_suffix,
        min_output_bytes=transcode.min_output_bytes,
        # Tool paths
        ffmpeg_path=Path(tools.ffmpeg).expanduser() if tools.ffmpeg else None,
        ffprobe_path=Path(tools.ffprobe).expanduser() if tools.ffprobe else None,
        # Processing
        processing_workers=file_config.processing.workers,
        # Logging
        logging_level=logging_conf.level,
        logging_file=(
            Path(logging_conf.file).expanduser() if logging_conf.file else None
        ),
        logging_format=logging_conf.format,
        logging_include_stderr=logging_conf.include_stderr,
        logging_max_bytes=logging_conf.max_bytes,
        logging_backup_count=logging_conf.backup_count,
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from VSHRINK_* environment variables.

    Raises:
        ValueError: If VSHRINK_HWACCEL names an unknown accelerator.
    """
    hwaccel = reader.get_str("VSHRINK_HWACCEL")

    return ConfigSource(
        # Transcode
        target_size_bytes=reader.get_size("VSHRINK_TARGET_SIZE"),
        size_threshold_bytes=reader.get_size("VSHRINK_SIZE_THRESHOLD"),
        video_codec=reader.get_str("VSHRINK_VIDEO_CODEC"),
        preset=reader.get_str("VSHRINK_PRESET"),
        fallback_other_bitrate_bps=reader.get_int("VSHRINK_FALLBACK_OTHER_BITRATE"),
        accelerator=AcceleratorClass.from_name(hwaccel) if hwaccel else None,
        # Tool paths
        ffmpeg_path=reader.get_path("VSHRINK_FFMPEG_PATH"),
        ffprobe_path=reader.get_path("VSHRINK_FFPROBE_PATH"),
        # Processing
        processing_workers=reader.get_int("VSHRINK_WORKERS"),
        # Logging
        logging_level=reader.get_str("VSHRINK_LOG_LEVEL"),
        logging_file=reader.get_path("VSHRINK_LOG_FILE", must_exist=False),
        logging_format=reader.get_str("VSHRINK_LOG_FORMAT"),
    )
