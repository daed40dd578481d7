"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed in as a ConfigSource)
2. Environment variables (VSHRINK_*)
3. Config file (~/.vshrink/config.toml)
4. Default values

Environment variables:
- VSHRINK_FFMPEG_PATH / VSHRINK_FFPROBE_PATH: tool executables
- VSHRINK_TARGET_SIZE: target container size ("15GiB" or bytes)
- VSHRINK_SIZE_THRESHOLD: files strictly larger than this are converted
- VSHRINK_VIDEO_CODEC / VSHRINK_PRESET: final encoder and its preset
- VSHRINK_FALLBACK_OTHER_BITRATE: bps assumed for undetected audio/subtitles
- VSHRINK_HWACCEL: none, intel, amd or nvidia
- VSHRINK_WORKERS: files converted in parallel
- VSHRINK_LOG_LEVEL / VSHRINK_LOG_FILE / VSHRINK_LOG_FORMAT: logging
- VSHRINK_CONFIG_PATH: path to config file (overrides default location)
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from vshrink.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from vshrink.config.env import EnvReader
from vshrink.config.file_models import ConfigFileModel, format_validation_error
from vshrink.config.models import VShrinkConfig
from vshrink.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".vshrink"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


def get_default_config_path(env_reader: EnvReader | None = None) -> Path:
    """Get the config file path.

    Can be overridden by the VSHRINK_CONFIG_PATH environment variable.
    """
    reader = env_reader or EnvReader()
    env_path = reader.get_str("VSHRINK_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(path: Path) -> ConfigFileModel:
    """Load and validate a TOML configuration file.

    A missing file is not an error: it yields an all-defaults model.

    Raises:
        ConfigError: If the file cannot be read, is not valid TOML, or
            contains unknown keys or invalid values.
    """
    if not path.exists():
        logger.debug("Config file not found, using defaults: %s", path)
        return ConfigFileModel()

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    try:
        model = ConfigFileModel.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{path}: {format_validation_error(e)}") from e

    logger.debug("Loaded config file: %s", path)
    return model


def get_config(
    config_path: Path | None = None,
    cli_source: ConfigSource | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
) -> VShrinkConfig:
    """Get vshrink configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides VSHRINK_CONFIG_PATH).
        cli_source: Values given on the command line.
        env_reader: Optional EnvReader for testing (uses os.environ if None).

    Returns:
        VShrinkConfig with merged configuration.

    Raises:
        ConfigError: If the config file or any merged value is invalid.
    """
    reader = env_reader or EnvReader()
    path = config_path or get_default_config_path(reader)

    file_model = load_config_file(path)

    builder = ConfigBuilder()
    try:
        builder.apply(source_from_file(file_model))
        builder.apply(source_from_env(reader))
        if cli_source is not None:
            builder.apply(cli_source)
        return builder.build()
    except ValueError as e:
        raise ConfigError(str(e)) from e
