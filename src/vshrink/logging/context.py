"""Worker context for log records.

When several files are converted in parallel, every log line is tagged with
the worker and file it belongs to. The context lives in a ContextVar, so
each worker thread sees only its own.
"""

from __future__ import annotations

import contextvars
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class WorkerContext:
    """Identifies the worker and file a log record belongs to."""

    worker_id: str
    """Worker number, zero-padded ("01")."""

    file_id: str | None = None
    """Position of the file in the batch ("F003")."""

    file_path: str | None = None

    @property
    def tag(self) -> str:
        """Compact text tag: "[W01:F003] " or "[W01] "."""
        if self.file_id:
            return f"[W{self.worker_id}:{self.file_id}] "
        return f"[W{self.worker_id}] "


_current: contextvars.ContextVar[WorkerContext | None] = contextvars.ContextVar(
    "vshrink_worker_context", default=None
)


def get_worker_context() -> WorkerContext | None:
    return _current.get()


@contextmanager
def worker_context(
    worker_id: str,
    file_id: str | None = None,
    file_path: Path | str | None = None,
) -> Iterator[WorkerContext]:
    """Tag all log records emitted inside the block.

    Example:
        with worker_context("01", "F001", "/media/movie.mkv"):
            logger.info("Pass 1 complete")  # "[W01:F001] ... Pass 1 complete"
    """
    context = WorkerContext(
        worker_id=worker_id,
        file_id=file_id,
        file_path=str(file_path) if file_path is not None else None,
    )
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


class WorkerContextFilter(logging.Filter):
    """Adds worker_id, file_id, file_path and worker_tag to every record.

    Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = _current.get()
        if context is None:
            record.worker_id = None
            record.file_id = None
            record.file_path = None
            record.worker_tag = ""
        else:
            record.worker_id = context.worker_id
            record.file_id = context.file_id
            record.file_path = context.file_path
            record.worker_tag = context.tag
        return True
