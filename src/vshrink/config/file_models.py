"""Pydantic models for the TOML configuration file.

The file mirrors the sections of VShrinkConfig:

    [transcode]
    target_size = "15GiB"
    size_threshold = 22548578303
    video_codec = "libx265"
    preset = "medium"
    fallback_other_bitrate = 8000000
    hwaccel = "nvidia"

    [tools]
    ffmpeg = "/usr/local/bin/ffmpeg"

    [processing]
    workers = 2

    [logging]
    level = "debug"
    file = "~/.vshrink/vshrink.log"

Unknown keys are rejected so typos surface instead of being ignored.
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vshrink.core.formatting import parse_size
from vshrink.domain.models import AcceleratorClass


class TranscodeFileModel(BaseModel):
    """Pydantic model for the [transcode] section."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    target_size: int | None = Field(default=None, gt=0)
    size_threshold: int | None = Field(default=None, ge=0)
    video_codec: str | None = Field(default=None, min_length=1)
    preset: str | None = Field(default=None, min_length=1)
    fallback_other_bitrate: int | None = Field(default=None, gt=0)
    hwaccel: str | None = None
    output_suffix: str | None = Field(default=None, min_length=1)
    min_output_bytes: int | None = Field(default=None, ge=0)

    @field_validator("target_size", "size_threshold", mode="before")
    @classmethod
    def parse_byte_size(cls, v: object) -> object:
        """Accept human sizes such as "15GiB" or "21G"."""
        if isinstance(v, str):
            return parse_size(v)
        return v

    @field_validator("hwaccel")
    @classmethod
    def validate_hwaccel(cls, v: str | None) -> str | None:
        """Validate accelerator name."""
        if v is None:
            return None
        return AcceleratorClass.from_name(v).value


class ToolsFileModel(BaseModel):
    """Pydantic model for the [tools] section."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    ffmpeg: str | None = None
    ffprobe: str | None = None


class ProcessingFileModel(BaseModel):
    """Pydantic model for the [processing] section."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    workers: int | None = Field(default=None, ge=1)


class LoggingFileModel(BaseModel):
    """Pydantic model for the [logging] section."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    level: str | None = None
    file: str | None = None
    format: str | None = None
    include_stderr: bool | None = None
    max_bytes: int | None = Field(default=None, gt=0)
    backup_count: int | None = Field(default=None, ge=0)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str | None) -> str | None:
        if v is not None and v.lower() not in ("debug", "info", "warning", "error"):
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: debug, info, warning, error"
            )
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str | None) -> str | None:
        if v is not None and v.lower() not in ("text", "json"):
            raise ValueError(f"Invalid log format '{v}'. Must be one of: text, json")
        return v


class ConfigFileModel(BaseModel):
    """Pydantic model for the whole configuration file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    transcode: TranscodeFileModel = Field(default_factory=TranscodeFileModel)
    tools: ToolsFileModel = Field(default_factory=ToolsFileModel)
    processing: ProcessingFileModel = Field(default_factory=ProcessingFileModel)
    logging: LoggingFileModel = Field(default_factory=LoggingFileModel)


def format_validation_error(error: ValidationError) -> str:
    """Format a Pydantic validation error into a user-friendly message."""
    errors = error.errors()
    if errors:
        first_error = errors[0]
        loc = ".".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", str(error))
        if loc:
            return f"Config validation failed: {loc}: {msg}"
        return f"Config validation failed: {msg}"
    return f"Config validation failed: {error}"
