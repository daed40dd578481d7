"""Unit tests for pass log artifacts and stderr progress parsing."""

from pathlib import Path
from unittest.mock import patch

from vshrink.executor.progress import parse_stderr_progress
from vshrink.executor.types import PassLogArtifacts


class TestPassLogArtifacts:
    def test_cleanup_removes_x264_and_x265_logs(self, tmp_path: Path) -> None:
        base = tmp_path / "Film.mkv_ffmpeg2pass"
        created = [
            Path(f"{base}-0.log"),
            Path(f"{base}-0.log.mbtree"),
            Path(f"{base}.log"),
            Path(f"{base}.log.cutree"),
        ]
        for path in created:
            path.write_text("stats")
        unrelated = tmp_path / "Film.mkv"
        unrelated.write_text("video")

        artifacts = PassLogArtifacts(base)
        assert sorted(artifacts.existing()) == sorted(created)
        assert artifacts.cleanup() == []

        assert artifacts.existing() == []
        assert unrelated.exists()

    def test_cleanup_with_nothing_to_remove(self, tmp_path: Path) -> None:
        assert PassLogArtifacts(tmp_path / "none").cleanup() == []

    def test_reports_files_it_could_not_remove(self, tmp_path: Path) -> None:
        base = tmp_path / "locked"
        log = Path(f"{base}.log")
        log.write_text("stats")

        with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            leftover = PassLogArtifacts(base).cleanup()

        assert leftover == [log]


class TestParseStderrProgress:
    def test_full_progress_line(self) -> None:
        progress = parse_stderr_progress(
            "frame= 1234 fps= 30 q=28.0 size=   10240kB "
            "time=00:01:23.45 bitrate=5000.0kbits/s speed=2.01x"
        )

        assert progress is not None
        assert progress.frame == 1234
        assert progress.fps == 30.0
        assert progress.bitrate == "5000.0kbits/s"
        assert progress.speed == "2.01x"
        assert progress.out_time_seconds == 83.45

    def test_non_progress_line(self) -> None:
        assert parse_stderr_progress("Stream #0:0: Video: hevc") is None

    def test_na_values_are_dropped(self) -> None:
        progress = parse_stderr_progress("frame=    0 bitrate=N/A speed=N/A")
        assert progress.bitrate is None
        assert progress.speed is None

    def test_percent_is_capped_and_needs_duration(self) -> None:
        progress = parse_stderr_progress("frame=10 time=02:00:00.00")
        assert progress.get_percent(3600) == 100.0
        assert progress.get_percent(None) == 0.0
        assert progress.get_percent(0) == 0.0
