"""Encoder process runner.

FFmpegEncoder runs one ffmpeg pass to completion, streaming stderr into the
log with throttled progress lines. No timeout is imposed: a full-length
encode of a large source legitimately runs for hours. cancel() terminates
every in-flight process so an interrupted batch leaves no orphans.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
from collections import deque
from pathlib import Path
from typing import Protocol

from vshrink.domain.models import EncodeJob
from vshrink.executor.command import EncodeCommandBuilder
from vshrink.executor.progress import parse_stderr_progress
from vshrink.executor.types import EncodeResult

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES = 20
TERMINATE_GRACE_SECONDS = 10.0


class Encoder(Protocol):
    """Protocol for encoder implementations."""

    def run_pass(
        self, job: EncodeJob, pass_number: int, output: Path | None = None
    ) -> EncodeResult:
        """Run one pass; output None means the discard sink."""
        ...

    def cancel(self) -> None:
        """Stop all running passes and refuse new ones."""
        ...


class FFmpegEncoder:
    """Runs ffmpeg passes as blocking subprocesses."""

    def __init__(
        self,
        ffmpeg_path: Path,
        *,
        builder: EncodeCommandBuilder | None = None,
        progress_interval: float = 30.0,
    ) -> None:
        """Initialize the encoder.

        Args:
            ffmpeg_path: Resolved path to the ffmpeg executable.
            builder: Command builder (defaults to one for ffmpeg_path).
            progress_interval: Minimum seconds between progress log lines.
        """
        self._builder = builder or EncodeCommandBuilder(ffmpeg_path)
        self._progress_interval = progress_interval
        self._active: set[subprocess.Popen] = set()
        self._lock = threading.Lock()
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def run_pass(
        self, job: EncodeJob, pass_number: int, output: Path | None = None
    ) -> EncodeResult:
        """Run one ffmpeg pass and wait for it to exit."""
        if self._cancelled.is_set():
            return EncodeResult(success=False, return_code=-1, cancelled=True)

        cmd = self._builder.build_args(job, pass_number, output)
        logger.info(
            "Starting pass %d: %s",
            pass_number,
            job.source_path.name,
            extra={
                "input_path": str(job.source_path),
                "command": " ".join(cmd),
                "pass": pass_number,
            },
        )

        start = time.monotonic()
        try:
            process = subprocess.Popen(  # nosec B603 - args built from a job
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.error("Could not start ffmpeg for pass %d: %s", pass_number, e)
            return EncodeResult(success=False, return_code=-1, stderr_tail=str(e))

        with self._lock:
            self._active.add(process)
        try:
            # A cancel() that raced with Popen did not see this process
            if self._cancelled.is_set():
                self._terminate(process)
            tail = self._drain_stderr(process, job, pass_number)
            return_code = process.wait()
        finally:
            with self._lock:
                self._active.discard(process)

        elapsed = time.monotonic() - start
        cancelled = return_code != 0 and self._cancelled.is_set()
        if return_code == 0:
            logger.info(
                "Pass %d complete (%.1fs)",
                pass_number,
                elapsed,
                extra={"pass": pass_number, "elapsed_seconds": round(elapsed, 3)},
            )
        elif not cancelled:
            logger.error(
                "FFmpeg pass %d failed with exit code %d: %s",
                pass_number,
                return_code,
                tail.strip().splitlines()[-1] if tail.strip() else "no output",
            )

        return EncodeResult(
            success=return_code == 0,
            return_code=return_code,
            stderr_tail=tail,
            cancelled=cancelled,
            elapsed_seconds=elapsed,
        )

    def _drain_stderr(
        self, process: subprocess.Popen, job: EncodeJob, pass_number: int
    ) -> str:
        """Forward stderr to the log until EOF; return the last lines."""
        tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        last_progress = 0.0
        assert process.stderr is not None
        for line in process.stderr:
            line = line.rstrip()
            if not line:
                continue
            progress = parse_stderr_progress(line)
            if progress is None:
                tail.append(line)
                logger.debug("ffmpeg: %s", line)
                continue
            now = time.monotonic()
            if now - last_progress >= self._progress_interval:
                last_progress = now
                logger.info(
                    "Pass %d: %.1f%% (frame %s, speed %s)",
                    pass_number,
                    progress.get_percent(job.duration_seconds),
                    progress.frame,
                    progress.speed or "?",
                )
        return "\n".join(tail)

    def cancel(self) -> None:
        """Terminate all running ffmpeg processes and refuse new passes."""
        self._cancelled.set()
        with self._lock:
            active = list(self._active)
        for process in active:
            self._terminate(process)

    @staticmethod
    def _terminate(process: subprocess.Popen) -> None:
        if process.poll() is not None:
            return
        logger.warning("Terminating ffmpeg (pid %d)", process.pid)
        process.terminate()
        try:
            process.wait(timeout=TERMINATE_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            logger.warning("ffmpeg (pid %d) ignored SIGTERM, killing", process.pid)
            process.kill()
