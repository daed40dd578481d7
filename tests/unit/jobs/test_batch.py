"""Unit tests for BatchDriver and BatchSummary."""

import logging
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from vshrink.domain.models import (
    DispositionAction,
    JobOutcome,
    OrchestratorState,
    OutcomeKind,
)
from vshrink.exceptions import ProbeError
from vshrink.executor.orchestrator import TwoPassOrchestrator
from vshrink.jobs import BatchDriver, BatchSummary, outcome_to_dict


@pytest.fixture
def files(tmp_path: Path, video_file) -> list[Path]:
    return [
        video_file(tmp_path / "media" / name) for name in ("a.mkv", "b.mkv", "c.mkv")
    ]


@pytest.fixture
def build_driver(make_introspector, fake_encoder, fake_disposer, settings):
    """Wire a driver around the fakes; probe results are keyed by file name."""

    def _build(
        results: dict,
        action: DispositionAction = DispositionAction.DELETE,
        stop_event: threading.Event | None = None,
        **kwargs,
    ) -> BatchDriver:
        stop_event = stop_event or threading.Event()
        orchestrator = TwoPassOrchestrator(
            fake_encoder, fake_disposer, action=action, cancel_event=stop_event
        )
        return BatchDriver(
            make_introspector(results),
            orchestrator,
            settings,
            encoder=fake_encoder,
            stop_event=stop_event,
            **kwargs,
        )

    return _build


class TestProcessFile:
    def test_converts_probed_file(
        self, files, metadata_factory, build_driver, fake_disposer
    ) -> None:
        driver = build_driver({"a.mkv": metadata_factory()})

        outcome = driver.process_file(files[0])

        assert outcome.kind is OutcomeKind.CONVERTED
        assert outcome.output_path == files[0].with_name("a_15GB.mkv")
        assert fake_disposer.calls == [(DispositionAction.DELETE, files[0], None)]

    def test_probe_error_skips(self, files, build_driver, fake_encoder) -> None:
        driver = build_driver({"a.mkv": ProbeError("No video stream")})

        outcome = driver.process_file(files[0])

        assert outcome.kind is OutcomeKind.SKIPPED
        assert outcome.reason == "No video stream"
        assert fake_encoder.calls == []

    def test_budget_exhausted_skips(
        self, files, metadata_factory, build_driver, fake_encoder
    ) -> None:
        metadata = metadata_factory(duration_seconds=4295, audio_bitrate_bps=30_000_000)
        driver = build_driver({"a.mkv": metadata})

        outcome = driver.process_file(files[0])

        assert outcome.kind is OutcomeKind.SKIPPED
        assert "zero or negative" in outcome.reason
        assert fake_encoder.calls == []

    def test_low_confidence_is_logged(
        self,
        files,
        metadata_factory,
        build_driver,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        metadata = metadata_factory(audio_bitrate_bps=0, audio_stream_count=2)
        driver = build_driver({"a.mkv": metadata}, action=DispositionAction.DRYRUN)

        with caplog.at_level(logging.WARNING, logger="vshrink.jobs.batch"):
            driver.process_file(files[0])

        assert "Could not detect audio/subtitle bitrate for a.mkv" in caplog.text
        assert "2 audio" in caplog.text


class TestRun:
    def test_continues_after_failures(self, files, metadata_factory, build_driver):
        metadata = metadata_factory()
        driver = build_driver({"a.mkv": metadata, "c.mkv": metadata})

        summary = driver.run(files)

        assert [o.source_path.name for o in summary.outcomes] == [
            "a.mkv",
            "b.mkv",
            "c.mkv",
        ]
        assert summary.converted == 2
        assert summary.skipped == 1
        assert summary.failed == 0
        assert summary.not_started == 0
        assert summary.has_failures is False

    def test_parallel_workers_keep_input_order(
        self, files, metadata_factory, build_driver, fake_encoder
    ) -> None:
        driver = build_driver(
            {path.name: metadata_factory() for path in files}, workers=3
        )

        summary = driver.run(files)

        assert [o.source_path for o in summary.outcomes] == files
        assert summary.converted == 3
        for path in files:
            passes = [p for source, p, _ in fake_encoder.calls if source == path]
            assert passes == [1, 2]

    def test_on_outcome_called_per_file(self, files, build_driver) -> None:
        seen: list[JobOutcome] = []
        driver = build_driver({}, on_outcome=seen.append)

        driver.run(files)

        assert sorted(o.source_path.name for o in seen) == ["a.mkv", "b.mkv", "c.mkv"]

    def test_unexpected_error_becomes_failure(self, files, build_driver) -> None:
        driver = build_driver({"a.mkv": RuntimeError("disk on fire")})

        summary = driver.run(files[:1])

        assert summary.failed == 1
        assert summary.outcomes[0].reason == "unexpected error: disk on fire"
        assert summary.outcomes[0].stage is None
        assert summary.has_failures is True

    def test_stop_event_skips_remaining_files(
        self, files, metadata_factory, build_driver
    ) -> None:
        stop_event = threading.Event()
        stop_event.set()
        driver = build_driver(
            {path.name: metadata_factory() for path in files}, stop_event=stop_event
        )

        summary = driver.run(files)

        assert [o.reason for o in summary.outcomes] == ["cancelled"] * 3

    def test_keyboard_interrupt_cancels_encoder(
        self, files, build_driver, fake_encoder
    ) -> None:
        driver = build_driver({})

        with patch("vshrink.jobs.batch.as_completed", side_effect=KeyboardInterrupt):
            summary = driver.run(files)

        assert summary.interrupted is True
        assert fake_encoder.cancel_calls == 1

    def test_empty_batch(self, build_driver) -> None:
        summary = build_driver({}).run([])
        assert summary.total_candidates == 0
        assert summary.outcomes == []

    def test_rejects_zero_workers(self, build_driver) -> None:
        with pytest.raises(ValueError, match="workers"):
            build_driver({}, workers=0)


class TestBatchSummary:
    def test_to_dict(self, tmp_path: Path) -> None:
        source = tmp_path / "a.mkv"
        summary = BatchSummary(
            total_candidates=2,
            outcomes=[
                JobOutcome.failed(
                    source,
                    OrchestratorState.PASS1_FAILED,
                    "ffmpeg exited with code 1",
                    states=(
                        OrchestratorState.PLANNED,
                        OrchestratorState.PASS1_RUNNING,
                        OrchestratorState.PASS1_FAILED,
                    ),
                )
            ],
            interrupted=True,
            elapsed_seconds=12.3456,
        )

        data = summary.to_dict()

        assert data["summary"] == {
            "total": 2,
            "converted": 0,
            "skipped": 0,
            "failed": 1,
            "not_started": 1,
            "interrupted": True,
            "duration_seconds": 12.35,
        }
        assert data["results"] == [outcome_to_dict(summary.outcomes[0])]
        assert data["results"][0]["stage"] == "pass1_failed"
        assert data["results"][0]["output"] is None
