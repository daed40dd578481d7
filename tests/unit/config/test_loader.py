"""Tests for configuration loading and precedence."""

from pathlib import Path

import pytest

from vshrink.config.builder import ConfigSource
from vshrink.config.env import EnvReader
from vshrink.config.loader import (
    DEFAULT_CONFIG_FILE,
    get_config,
    get_default_config_path,
    load_config_file,
)
from vshrink.domain.models import AcceleratorClass
from vshrink.exceptions import ConfigError


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(
        """\
[transcode]
target_size = "14GiB"
preset = "slow"
hwaccel = "amd"

[processing]
workers = 2

[logging]
level = "debug"
"""
    )
    return path


class TestGetDefaultConfigPath:
    def test_default_location(self) -> None:
        assert get_default_config_path(EnvReader(env={})) == DEFAULT_CONFIG_FILE

    def test_env_override(self, tmp_path: Path) -> None:
        reader = EnvReader(env={"VSHRINK_CONFIG_PATH": str(tmp_path / "c.toml")})
        assert get_default_config_path(reader) == tmp_path / "c.toml"


class TestLoadConfigFile:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        model = load_config_file(tmp_path / "absent.toml")
        assert model.transcode.target_size is None

    def test_valid_file(self, config_file: Path) -> None:
        model = load_config_file(config_file)
        assert model.transcode.target_size == 14 * 1024**3
        assert model.transcode.hwaccel == "amd"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[transcode\npreset = ")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config_file(path)

    def test_unknown_key_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "typo.toml"
        path.write_text('[transcode]\ntarget_szie = "15GiB"\n')
        with pytest.raises(ConfigError, match="transcode.target_szie"):
            load_config_file(path)

    def test_invalid_size_string(self, tmp_path: Path) -> None:
        path = tmp_path / "size.toml"
        path.write_text('[transcode]\ntarget_size = "fifteen gigs"\n')
        with pytest.raises(ConfigError, match="Config validation failed"):
            load_config_file(path)

    def test_invalid_hwaccel(self, tmp_path: Path) -> None:
        path = tmp_path / "hw.toml"
        path.write_text('[transcode]\nhwaccel = "voodoo"\n')
        with pytest.raises(ConfigError, match="hwaccel"):
            load_config_file(path)


class TestGetConfig:
    def test_file_values(self, config_file: Path) -> None:
        config = get_config(config_file, env_reader=EnvReader(env={}))

        assert config.transcode.target_container_size_bytes == 14 * 1024**3
        assert config.transcode.preset == "slow"
        assert config.transcode.accelerator is AcceleratorClass.AMD
        assert config.processing.workers == 2
        assert config.logging.level == "debug"

    def test_env_overrides_file(self, config_file: Path) -> None:
        reader = EnvReader(env={"VSHRINK_PRESET": "fast", "VSHRINK_WORKERS": "3"})
        config = get_config(config_file, env_reader=reader)

        assert config.transcode.preset == "fast"
        assert config.processing.workers == 3
        assert config.transcode.target_container_size_bytes == 14 * 1024**3

    def test_cli_overrides_env(self, config_file: Path) -> None:
        reader = EnvReader(env={"VSHRINK_HWACCEL": "intel"})
        config = get_config(
            config_file,
            cli_source=ConfigSource(accelerator=AcceleratorClass.NVIDIA),
            env_reader=reader,
        )
        assert config.transcode.accelerator is AcceleratorClass.NVIDIA

    def test_env_config_path(self, config_file: Path) -> None:
        reader = EnvReader(env={"VSHRINK_CONFIG_PATH": str(config_file)})
        assert get_config(env_reader=reader).transcode.preset == "slow"

    def test_invalid_merged_value_is_config_error(self, tmp_path: Path) -> None:
        reader = EnvReader(env={"VSHRINK_HWACCEL": "voodoo"})
        with pytest.raises(ConfigError, match="Invalid hardware type"):
            get_config(tmp_path / "absent.toml", env_reader=reader)

    def test_invalid_cli_value_is_config_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="target_container_size_bytes"):
            get_config(
                tmp_path / "absent.toml",
                cli_source=ConfigSource(target_size_bytes=0),
                env_reader=EnvReader(env={}),
            )
