"""Tests for EnvReader class."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from vshrink.config.env import EnvReader


class TestEnvReaderGetStr:
    """Tests for EnvReader.get_str method."""

    def test_returns_value_when_set(self) -> None:
        reader = EnvReader(env={"MY_VAR": "hello"})
        assert reader.get_str("MY_VAR") == "hello"

    def test_returns_default_when_not_set(self) -> None:
        reader = EnvReader(env={})
        assert reader.get_str("MY_VAR", "default") == "default"

    def test_returns_empty_string_when_set_to_empty(self) -> None:
        """An empty value is still a value."""
        reader = EnvReader(env={"MY_VAR": ""})
        assert reader.get_str("MY_VAR", "default") == ""


class TestEnvReaderGetInt:
    """Tests for EnvReader.get_int method."""

    def test_returns_value_when_set(self) -> None:
        reader = EnvReader(env={"VSHRINK_WORKERS": "3"})
        assert reader.get_int("VSHRINK_WORKERS") == 3

    def test_returns_default_and_warns_for_invalid(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        reader = EnvReader(env={"VSHRINK_WORKERS": "many"})
        with caplog.at_level(logging.WARNING):
            result = reader.get_int("VSHRINK_WORKERS", 1)
        assert result == 1
        assert "Invalid integer value for VSHRINK_WORKERS: many" in caplog.text


class TestEnvReaderGetSize:
    """Tests for EnvReader.get_size method."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("16106127360", 16_106_127_360),
            ("15GiB", 16_106_127_360),
            ("15G", 16_106_127_360),
            ("512 MiB", 536_870_912),
        ],
    )
    def test_parses_sizes(self, value: str, expected: int) -> None:
        reader = EnvReader(env={"VSHRINK_TARGET_SIZE": value})
        assert reader.get_size("VSHRINK_TARGET_SIZE") == expected

    def test_invalid_size_returns_default(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        reader = EnvReader(env={"VSHRINK_TARGET_SIZE": "huge"})
        with caplog.at_level(logging.WARNING):
            assert reader.get_size("VSHRINK_TARGET_SIZE", 42) == 42
        assert "Invalid size value" in caplog.text


class TestEnvReaderGetPath:
    """Tests for EnvReader.get_path method."""

    def test_existing_path(self, tmp_path: Path) -> None:
        reader = EnvReader(env={"VSHRINK_FFMPEG_PATH": str(tmp_path)})
        assert reader.get_path("VSHRINK_FFMPEG_PATH") == tmp_path

    def test_missing_path_returns_default(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        reader = EnvReader(env={"VSHRINK_FFMPEG_PATH": str(tmp_path / "nope")})
        with caplog.at_level(logging.WARNING):
            assert reader.get_path("VSHRINK_FFMPEG_PATH") is None
        assert "non-existent path" in caplog.text

    def test_missing_path_allowed(self, tmp_path: Path) -> None:
        target = tmp_path / "logs" / "vshrink.log"
        reader = EnvReader(env={"VSHRINK_LOG_FILE": str(target)})
        assert reader.get_path("VSHRINK_LOG_FILE", must_exist=False) == target
