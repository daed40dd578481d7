"""Two-pass encode orchestration.

TwoPassOrchestrator drives one EncodeJob through an explicit state machine:

    PLANNED -> PASS1_RUNNING -> PASS1_DONE -> PASS2_RUNNING -> PASS2_DONE
            -> VERIFYING -> VERIFIED -> DISPOSING -> COMPLETE

Each running stage may instead end in its failed state (PASS1_FAILED,
PASS2_FAILED, VERIFY_FAILED, DISPOSE_FAILED), which is terminal for the file.
Pass log artifacts are removed whenever a terminal state is reached. Pass 2
failures, including unexpected encoder errors, also remove the partial
output; verify failures keep both files for inspection. Nothing is retried.

The orchestrator holds no per-job state, so one instance can serve several
worker threads.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Protocol

from vshrink.core.formatting import format_file_size
from vshrink.domain.models import (
    DispositionAction,
    EncodeJob,
    JobOutcome,
    OrchestratorState,
)
from vshrink.exceptions import DisposeFailure, EncodeFailure, VerifyFailure
from vshrink.executor.disposition import DispositionResult
from vshrink.executor.encoder import Encoder
from vshrink.executor.types import PassLogArtifacts

logger = logging.getLogger(__name__)

CANCELLED_REASON = "cancelled"

State = OrchestratorState

TRANSITIONS: dict[OrchestratorState, frozenset[OrchestratorState]] = {
    State.PLANNED: frozenset({State.PASS1_RUNNING, State.PASS1_FAILED}),
    State.PASS1_RUNNING: frozenset({State.PASS1_DONE, State.PASS1_FAILED}),
    State.PASS1_DONE: frozenset({State.PASS2_RUNNING, State.PASS2_FAILED}),
    State.PASS2_RUNNING: frozenset({State.PASS2_DONE, State.PASS2_FAILED}),
    State.PASS2_DONE: frozenset({State.VERIFYING}),
    State.VERIFYING: frozenset({State.VERIFIED, State.VERIFY_FAILED}),
    State.VERIFIED: frozenset({State.DISPOSING}),
    State.DISPOSING: frozenset({State.COMPLETE, State.DISPOSE_FAILED}),
    State.PASS1_FAILED: frozenset(),
    State.PASS2_FAILED: frozenset(),
    State.VERIFY_FAILED: frozenset(),
    State.COMPLETE: frozenset(),
    State.DISPOSE_FAILED: frozenset(),
}

# pass number -> (running, done, failed)
_PASS_STATES = {
    1: (State.PASS1_RUNNING, State.PASS1_DONE, State.PASS1_FAILED),
    2: (State.PASS2_RUNNING, State.PASS2_DONE, State.PASS2_FAILED),
}


class Disposer(Protocol):
    """Protocol for disposition executors."""

    def execute(
        self,
        action: DispositionAction,
        path: Path,
        backup_root: Path | None = None,
    ) -> DispositionResult: ...


class StateTracker:
    """Current state and history of one job, validated against TRANSITIONS."""

    def __init__(self, job: EncodeJob) -> None:
        self._job = job
        self._history: list[OrchestratorState] = [State.PLANNED]

    @property
    def state(self) -> OrchestratorState:
        return self._history[-1]

    @property
    def history(self) -> tuple[OrchestratorState, ...]:
        return tuple(self._history)

    def transition(self, new_state: OrchestratorState) -> None:
        """Move to new_state.

        Raises:
            RuntimeError: If the transition is not in the transition table.
        """
        if new_state not in TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal state transition {self.state.value} -> "
                f"{new_state.value} for {self._job.source_path}"
            )
        logger.debug(
            "%s: %s -> %s",
            self._job.source_path.name,
            self.state.value,
            new_state.value,
        )
        self._history.append(new_state)


class TwoPassOrchestrator:
    """Runs analysis pass, distribution pass, verification and disposition."""

    def __init__(
        self,
        encoder: Encoder,
        disposer: Disposer,
        *,
        action: DispositionAction,
        backup_root: Path | None = None,
        min_output_bytes: int = 1024,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            encoder: Runs encoder passes.
            disposer: Deletes or moves the original after verification.
            action: What to do with verified originals.
            backup_root: Destination directory for the move action.
            min_output_bytes: Outputs must be strictly larger than this.
            cancel_event: When set, no further pass is started.

        Raises:
            ValueError: If action is MOVE and backup_root is None.
        """
        if action is DispositionAction.MOVE and backup_root is None:
            raise ValueError("backup_root is required for the move action")
        self._encoder = encoder
        self._disposer = disposer
        self._action = action
        self._backup_root = backup_root
        self._min_output_bytes = min_output_bytes
        self._cancel_event = cancel_event or threading.Event()

    @property
    def action(self) -> DispositionAction:
        return self._action

    def run(self, job: EncodeJob) -> JobOutcome:
        """Drive one job to a terminal state and report the outcome."""
        tracker = StateTracker(job)

        if self._action is DispositionAction.DRYRUN:
            logger.info("[DRY RUN] Would convert %s", job.source_path.name)
            return JobOutcome.skipped(job.source_path, "dry run", tracker.history)

        start = time.monotonic()
        artifacts = PassLogArtifacts(job.log_file_base)
        try:
            self._run_pass(job, 1, tracker)
            self._run_pass(job, 2, tracker)
            self._verify(job, tracker)
            self._dispose(job, tracker)
        except EncodeFailure as e:
            if e.pass_number == 2:
                self._remove_partial_output(job.output_path)
            return JobOutcome.failed(
                job.source_path,
                tracker.state,
                e.reason,
                states=tracker.history,
                elapsed_seconds=time.monotonic() - start,
            )
        except VerifyFailure as e:
            logger.error("Not touching original %s: %s", job.source_path, e)
            return JobOutcome.failed(
                job.source_path,
                tracker.state,
                str(e),
                output_path=job.output_path,
                states=tracker.history,
                elapsed_seconds=time.monotonic() - start,
            )
        except DisposeFailure as e:
            logger.error("Disposition of %s failed: %s", job.source_path, e)
            return JobOutcome.failed(
                job.source_path,
                tracker.state,
                str(e),
                output_path=job.output_path,
                states=tracker.history,
                elapsed_seconds=time.monotonic() - start,
            )
        finally:
            artifacts.cleanup()

        return JobOutcome.converted(
            job.source_path,
            job.output_path,
            states=tracker.history,
            elapsed_seconds=time.monotonic() - start,
        )

    def _run_pass(
        self, job: EncodeJob, pass_number: int, tracker: StateTracker
    ) -> None:
        running, done, failed = _PASS_STATES[pass_number]
        # Pass 1 writes to the discard sink
        output = job.output_path if pass_number == 2 else None

        if self._cancel_event.is_set():
            tracker.transition(failed)
            raise EncodeFailure(pass_number, CANCELLED_REASON)

        tracker.transition(running)
        try:
            result = self._encoder.run_pass(job, pass_number, output)
        except Exception as e:
            logger.exception("Pass %d crashed for %s", pass_number, job.source_path)
            tracker.transition(failed)
            raise EncodeFailure(pass_number, f"unexpected error: {e}") from e
        if result.success:
            tracker.transition(done)
            return

        tracker.transition(failed)
        if result.cancelled or self._cancel_event.is_set():
            logger.warning("Pass %d cancelled: %s", pass_number, job.source_path.name)
            raise EncodeFailure(pass_number, CANCELLED_REASON)
        raise EncodeFailure(
            pass_number, f"ffmpeg exited with code {result.return_code}"
        )

    def _verify(self, job: EncodeJob, tracker: StateTracker) -> None:
        tracker.transition(State.VERIFYING)
        output = job.output_path
        try:
            size = output.stat().st_size if output.is_file() else None
        except OSError:
            size = None

        if size is None:
            tracker.transition(State.VERIFY_FAILED)
            raise VerifyFailure(f"Output file is missing: {output}")
        if size <= self._min_output_bytes:
            tracker.transition(State.VERIFY_FAILED)
            raise VerifyFailure(
                f"Output file seems empty or invalid ({size} bytes): {output}"
            )

        tracker.transition(State.VERIFIED)
        logger.info("New file verified: %s (%s)", output.name, format_file_size(size))

    def _dispose(self, job: EncodeJob, tracker: StateTracker) -> None:
        tracker.transition(State.DISPOSING)
        result = self._disposer.execute(
            self._action, job.source_path, self._backup_root
        )
        if not result.success:
            tracker.transition(State.DISPOSE_FAILED)
            raise DisposeFailure(result.error_message or "unknown error")
        tracker.transition(State.COMPLETE)

    @staticmethod
    def _remove_partial_output(path: Path) -> None:
        if not path.exists():
            return
        logger.info("Deleting incomplete output file: %s", path)
        try:
            path.unlink()
        except OSError as e:
            logger.warning("Could not remove incomplete output %s: %s", path, e)
