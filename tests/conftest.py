"""Shared test fixtures for vshrink."""

import logging
import os
import threading
from pathlib import Path

import pytest

from vshrink.config.models import TranscodeSettings
from vshrink.domain.models import (
    AcceleratorClass,
    ColorTransfer,
    DispositionAction,
    EncodeJob,
    StreamMetadata,
)
from vshrink.exceptions import ProbeError
from vshrink.executor.disposition import DispositionResult
from vshrink.executor.types import EncodeResult


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the user's VSHRINK_* variables and config file out of tests."""
    for name in list(os.environ):
        if name.startswith("VSHRINK_"):
            monkeypatch.delenv(name)
    config_path = tmp_path / "vshrink-config" / "config.toml"
    monkeypatch.setenv("VSHRINK_CONFIG_PATH", str(config_path))
    return config_path


@pytest.fixture(autouse=True)
def restore_root_logging():
    """CLI tests reconfigure the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def make_video(path: Path, size: int = 2048) -> Path:
    """Create a sparse file of the given size."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        f.truncate(size)
    return path


@pytest.fixture
def metadata_factory():
    """Build StreamMetadata with sensible 2-hour 1080p SDR defaults."""

    def _make(**overrides) -> StreamMetadata:
        values = {
            "duration_seconds": 7200,
            "audio_bitrate_bps": 1_536_000,
            "subtitle_bitrate_bps": 0,
            "source_height": 1080,
            "color_transfer": ColorTransfer.SDR,
            "video_codec": "hevc",
            "source_width": 1920,
            "audio_stream_count": 1,
            "subtitle_stream_count": 0,
        }
        values.update(overrides)
        return StreamMetadata(**values)

    return _make


@pytest.fixture
def job_factory(tmp_path: Path):
    """Build an EncodeJob for a real (small) source file under tmp_path."""

    def _make(name: str = "movie.mkv", **overrides) -> EncodeJob:
        source = make_video(tmp_path / "media" / name)
        values = {
            "source_path": source,
            "output_path": source.with_name(f"{source.stem}_15GB{source.suffix}"),
            "log_file_base": source.with_name(f"{source.name}_ffmpeg2pass"),
            "target_video_bps": 16_359_697,
            "accelerator": AcceleratorClass.NONE,
            "duration_seconds": 7200,
        }
        values.update(overrides)
        return EncodeJob(**values)

    return _make


@pytest.fixture
def settings() -> TranscodeSettings:
    return TranscodeSettings()


class FakeEncoder:
    """Encoder double that writes pass logs and outputs instead of encoding.

    Args:
        fail_pass: Pass number that returns a failed result.
        output_size: Bytes written to the output on pass 2.
        cancel_on_pass: Pass number that sets cancel_event and reports
            a cancelled result.
        raise_on_pass: Pass number that raises RuntimeError after writing.
    """

    def __init__(
        self,
        fail_pass: int | None = None,
        output_size: int = 4096,
        cancel_on_pass: int | None = None,
        cancel_event: threading.Event | None = None,
        raise_on_pass: int | None = None,
    ) -> None:
        self.fail_pass = fail_pass
        self.output_size = output_size
        self.cancel_on_pass = cancel_on_pass
        self.cancel_event = cancel_event
        self.raise_on_pass = raise_on_pass
        self.calls: list[tuple[Path, int, Path | None]] = []
        self.cancel_calls = 0
        self._lock = threading.Lock()

    def run_pass(
        self, job: EncodeJob, pass_number: int, output: Path | None = None
    ) -> EncodeResult:
        with self._lock:
            self.calls.append((job.source_path, pass_number, output))
        Path(f"{job.log_file_base}.log").write_text("stats")

        if pass_number == self.cancel_on_pass:
            if self.cancel_event is not None:
                self.cancel_event.set()
            return EncodeResult(success=False, return_code=255, cancelled=True)

        if output is not None:
            with output.open("wb") as f:
                f.truncate(self.output_size)

        if pass_number == self.raise_on_pass:
            raise RuntimeError("encoder process vanished")

        if pass_number == self.fail_pass:
            return EncodeResult(
                success=False, return_code=1, stderr_tail="Conversion failed!"
            )
        return EncodeResult(success=True, return_code=0)

    def cancel(self) -> None:
        self.cancel_calls += 1


class FakeDisposer:
    """Disposer double that records calls and reports a configured result."""

    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.calls: list[tuple[DispositionAction, Path, Path | None]] = []

    def execute(
        self,
        action: DispositionAction,
        path: Path,
        backup_root: Path | None = None,
    ) -> DispositionResult:
        self.calls.append((action, path, backup_root))
        if self.succeed:
            return DispositionResult(success=True, action=action, source_path=path)
        return DispositionResult(
            success=False,
            action=action,
            source_path=path,
            error_message="Permission denied",
        )


class FakeIntrospector:
    """Introspector double returning canned metadata per file name.

    Names mapped to an exception instance raise it instead.
    """

    def __init__(self, results: dict[str, StreamMetadata | Exception]) -> None:
        self.results = results
        self.calls: list[Path] = []

    def get_metadata(self, path: Path) -> StreamMetadata:
        self.calls.append(path)
        result = self.results.get(path.name)
        if result is None:
            raise ProbeError(f"No video stream found: {path}")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_encoder() -> FakeEncoder:
    return FakeEncoder()


@pytest.fixture
def fake_disposer() -> FakeDisposer:
    return FakeDisposer()


@pytest.fixture
def make_encoder():
    return FakeEncoder


@pytest.fixture
def make_disposer():
    return FakeDisposer


@pytest.fixture
def make_introspector():
    return FakeIntrospector


@pytest.fixture
def video_file():
    """Factory creating sparse video files of a given size."""
    return make_video
