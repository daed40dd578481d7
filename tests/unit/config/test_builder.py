"""Tests for ConfigBuilder and the source factories."""

from pathlib import Path

import pytest

from vshrink.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from vshrink.config.env import EnvReader
from vshrink.config.file_models import ConfigFileModel
from vshrink.config.models import (
    DEFAULT_FALLBACK_OTHER_BITRATE_BPS,
    DEFAULT_SIZE_THRESHOLD_BYTES,
    DEFAULT_TARGET_SIZE_BYTES,
)
from vshrink.domain.models import AcceleratorClass


class TestConfigBuilder:
    def test_defaults(self) -> None:
        config = ConfigBuilder().build()
        transcode = config.transcode

        assert transcode.target_container_size_bytes == DEFAULT_TARGET_SIZE_BYTES
        assert transcode.size_threshold_bytes == DEFAULT_SIZE_THRESHOLD_BYTES
        assert transcode.video_codec == "libx265"
        assert transcode.preset == "medium"
        assert (
            transcode.fallback_other_bitrate_bps == DEFAULT_FALLBACK_OTHER_BITRATE_BPS
        )
        assert transcode.accelerator is AcceleratorClass.NONE
        assert transcode.output_suffix == "_15GB"
        assert config.processing.workers == 1
        assert config.logging.level == "info"
        assert config.tools.ffmpeg is None

    def test_later_source_wins(self) -> None:
        builder = ConfigBuilder()
        builder.apply(ConfigSource(preset="slow", processing_workers=2))
        builder.apply(ConfigSource(preset="veryslow"))
        config = builder.build()

        assert config.transcode.preset == "veryslow"
        assert config.processing.workers == 2

    def test_none_does_not_override(self) -> None:
        builder = ConfigBuilder()
        builder.apply(ConfigSource(accelerator=AcceleratorClass.AMD))
        builder.apply(ConfigSource(accelerator=None))
        assert builder.build().transcode.accelerator is AcceleratorClass.AMD

    def test_invalid_value_raises(self) -> None:
        builder = ConfigBuilder()
        builder.apply(ConfigSource(processing_workers=0))
        with pytest.raises(ValueError, match="workers"):
            builder.build()


class TestSourceFromFile:
    def test_maps_every_section(self) -> None:
        model = ConfigFileModel.model_validate(
            {
                "transcode": {
                    "target_size": "10GiB",
                    "size_threshold": "12G",
                    "hwaccel": "Intel",
                    "fallback_other_bitrate": 6_000_000,
                },
                "tools": {"ffmpeg": "/opt/ffmpeg/bin/ffmpeg"},
                "processing": {"workers": 2},
                "logging": {"level": "debug", "format": "json"},
            }
        )
        source = source_from_file(model)

        assert source.target_size_bytes == 10 * 1024**3
        assert source.size_threshold_bytes == 12 * 1024**3
        assert source.accelerator is AcceleratorClass.INTEL
        assert source.fallback_other_bitrate_bps == 6_000_000
        assert source.ffmpeg_path == Path("/opt/ffmpeg/bin/ffmpeg")
        assert source.ffprobe_path is None
        assert source.processing_workers == 2
        assert source.logging_level == "debug"
        assert source.logging_format == "json"

    def test_empty_file_sets_nothing(self) -> None:
        source = source_from_file(ConfigFileModel())
        assert source == ConfigSource()


class TestSourceFromEnv:
    def test_reads_vshrink_variables(self, tmp_path: Path) -> None:
        ffprobe = tmp_path / "ffprobe"
        ffprobe.touch()
        reader = EnvReader(
            env={
                "VSHRINK_TARGET_SIZE": "15GiB",
                "VSHRINK_HWACCEL": "nvidia",
                "VSHRINK_FFPROBE_PATH": str(ffprobe),
                "VSHRINK_WORKERS": "4",
                "VSHRINK_PRESET": "slow",
                "VSHRINK_LOG_LEVEL": "warning",
            }
        )
        source = source_from_env(reader)

        assert source.target_size_bytes == DEFAULT_TARGET_SIZE_BYTES
        assert source.accelerator is AcceleratorClass.NVIDIA
        assert source.ffprobe_path == ffprobe
        assert source.processing_workers == 4
        assert source.preset == "slow"
        assert source.logging_level == "warning"

    def test_unknown_hwaccel_raises(self) -> None:
        reader = EnvReader(env={"VSHRINK_HWACCEL": "voodoo"})
        with pytest.raises(ValueError, match="Invalid hardware type"):
            source_from_env(reader)

    def test_empty_environment(self) -> None:
        assert source_from_env(EnvReader(env={})) == ConfigSource()
