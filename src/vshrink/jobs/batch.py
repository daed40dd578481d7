"""Batch driver: probe, plan and convert every candidate file.

Candidates are processed by a bounded thread pool (one worker by default).
Each file runs start to finish inside one worker, so its two passes stay
ordered. Per-file failures are reported and the batch moves on.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from vshrink.config.models import TranscodeSettings
from vshrink.core.formatting import format_bitrate, format_gib
from vshrink.domain.models import JobOutcome, StreamMetadata
from vshrink.exceptions import BudgetExhausted, ProbeError
from vshrink.executor.encoder import Encoder
from vshrink.executor.orchestrator import TwoPassOrchestrator
from vshrink.introspector.interface import MediaIntrospector
from vshrink.jobs.summary import BatchSummary
from vshrink.logging import worker_context
from vshrink.planning.acceleration import describe_plan
from vshrink.planning.planner import PlannedJob, plan_encode_job

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[JobOutcome], None]


class BatchDriver:
    """Runs the probe -> plan -> orchestrate pipeline over a file list."""

    def __init__(
        self,
        introspector: MediaIntrospector,
        orchestrator: TwoPassOrchestrator,
        settings: TranscodeSettings,
        *,
        workers: int = 1,
        encoder: Encoder | None = None,
        stop_event: threading.Event | None = None,
        on_outcome: OutcomeCallback | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            introspector: Probes candidate files.
            orchestrator: Runs the two-pass encode for planned jobs.
            settings: Transcode settings used for planning.
            workers: Maximum files converted concurrently.
            encoder: Cancelled on interrupt so running passes stop.
            stop_event: Set on interrupt; share it with the orchestrator.
            on_outcome: Called in the calling thread as each file finishes.
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self._introspector = introspector
        self._orchestrator = orchestrator
        self._settings = settings
        self._workers = workers
        self._encoder = encoder
        self._stop_event = stop_event or threading.Event()
        self._on_outcome = on_outcome

    def process_file(self, path: Path) -> JobOutcome:
        """Probe, plan and convert one file."""
        if self._stop_event.is_set():
            return JobOutcome.skipped(path, "cancelled")

        try:
            metadata = self._introspector.get_metadata(path)
        except ProbeError as e:
            logger.error("Skipping %s: %s", path.name, e)
            return JobOutcome.skipped(path, str(e))

        try:
            planned = plan_encode_job(path, metadata, self._settings)
        except BudgetExhausted as e:
            logger.error("Skipping %s: %s", path.name, e)
            return JobOutcome.skipped(path, str(e))

        self._log_plan(path, metadata, planned)
        return self._orchestrator.run(planned.job)

    def _log_plan(
        self, path: Path, metadata: StreamMetadata, planned: PlannedJob
    ) -> None:
        try:
            size = format_gib(path.stat().st_size)
        except OSError:
            size = "unknown size"
        logger.info(
            "%s: %s, %ds, %dp %s",
            path.name,
            size,
            metadata.duration_seconds,
            metadata.source_height,
            "HDR" if metadata.is_hdr else "SDR",
        )
        if planned.budget.low_confidence:
            logger.warning(
                "Could not detect audio/subtitle bitrate for %s "
                "(%d audio, %d subtitle streams; may be PCM/TrueHD), "
                "applying a %s safety buffer",
                path.name,
                metadata.audio_stream_count,
                metadata.subtitle_stream_count,
                format_bitrate(planned.budget.other_bps),
            )
        if planned.job.accelerator is not self._settings.accelerator:
            logger.warning(
                "No %s decoder for %s source %s, decoding on the CPU",
                self._settings.accelerator.value,
                metadata.video_codec,
                path.name,
            )
        logger.info(
            "Audio/subtitle bitrate %s, target video bitrate %s, %s",
            format_bitrate(planned.budget.other_bps),
            format_bitrate(planned.budget.video_bps),
            describe_plan(planned.job.accelerator, planned.plan),
            extra={
                "target_video_bps": planned.budget.video_bps,
                "other_bps": planned.budget.other_bps,
                "output_path": str(planned.job.output_path),
            },
        )

    def _process_in_worker(
        self, path: Path, worker_id: str, file_id: str
    ) -> JobOutcome:
        with worker_context(worker_id, file_id, path):
            logger.info("=== FILE %s: %s", file_id, path)
            try:
                return self.process_file(path)
            except Exception as e:
                logger.exception("Unexpected error for %s: %s", path, e)
                return JobOutcome.failed(path, None, f"unexpected error: {e}")

    def run(self, paths: Sequence[Path]) -> BatchSummary:
        """Process a snapshot of candidate paths.

        Returns:
            BatchSummary with one outcome per file that was started.
        """
        snapshot = list(paths)
        summary = BatchSummary(total_candidates=len(snapshot))
        start = time.monotonic()
        if not snapshot:
            return summary

        file_id_width = len(str(len(snapshot)))
        futures: dict[Future[JobOutcome], int] = {}

        with ThreadPoolExecutor(
            max_workers=self._workers, thread_name_prefix="vshrink-worker"
        ) as executor:
            for index, path in enumerate(snapshot):
                # Worker ID is a logical slot, not the thread that runs the file
                worker_id = f"{(index % self._workers) + 1:02d}"
                file_id = f"F{index + 1:0{file_id_width}d}"
                future = executor.submit(
                    self._process_in_worker, path, worker_id, file_id
                )
                futures[future] = index

            try:
                for future in as_completed(futures):
                    if self._on_outcome is not None and not future.cancelled():
                        self._on_outcome(future.result())
            except KeyboardInterrupt:
                logger.warning("Interrupted, stopping running encodes")
                summary.interrupted = True
                self._stop_event.set()
                if self._encoder is not None:
                    self._encoder.cancel()
                for f in futures:
                    f.cancel()
                executor.shutdown(wait=True, cancel_futures=True)

        ordered = sorted(futures.items(), key=lambda item: item[1])
        summary.outcomes = [
            future.result() for future, _ in ordered if not future.cancelled()
        ]
        summary.elapsed_seconds = time.monotonic() - start
        return summary
