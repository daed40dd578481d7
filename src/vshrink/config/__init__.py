"""Configuration management for vshrink.

This module provides configuration loading with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (VSHRINK_*)
3. Config file (~/.vshrink/config.toml)
4. Default values (lowest priority)
"""

from vshrink.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from vshrink.config.env import EnvReader
from vshrink.config.loader import (
    get_config,
    get_default_config_path,
    load_config_file,
)
from vshrink.config.logging_factory import build_logging_config
from vshrink.config.models import (
    LoggingConfig,
    ProcessingConfig,
    ToolPathsConfig,
    TranscodeSettings,
    VShrinkConfig,
)

__all__ = [
    # Models
    "LoggingConfig",
    "ProcessingConfig",
    "ToolPathsConfig",
    "TranscodeSettings",
    "VShrinkConfig",
    # Builder
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "source_from_env",
    "source_from_file",
    # Loader
    "get_config",
    "get_default_config_path",
    "load_config_file",
    "build_logging_config",
]
