"""Fixtures for CLI tests that run commands without ffmpeg installed."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def fake_tools():
    """Resolve ffmpeg and ffprobe to fixed paths in every CLI module."""

    def _require(name: str, tools=None) -> Path:
        return Path(f"/usr/bin/{name}")

    with (
        patch("vshrink.cli.convert.require_tool", side_effect=_require),
        patch("vshrink.cli.plan.require_tool", side_effect=_require),
        patch("vshrink.cli.plan.get_tool_path", side_effect=_require),
    ):
        yield


@pytest.fixture
def media_dir(tmp_path: Path, video_file) -> Path:
    """Two oversized candidates and one file below the 1 KiB threshold."""
    directory = tmp_path / "media"
    video_file(directory / "a.mkv", size=4096)
    video_file(directory / "season" / "b.mp4", size=4096)
    video_file(directory / "small.mkv", size=512)
    (directory / "notes.txt").write_text("x" * 4096)
    return directory
