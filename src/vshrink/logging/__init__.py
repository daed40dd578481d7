"""Logging setup: text or JSON output, rotating files, worker tags."""

from vshrink.logging.config import configure_logging
from vshrink.logging.context import (
    WorkerContext,
    WorkerContextFilter,
    get_worker_context,
    worker_context,
)
from vshrink.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "WorkerContext",
    "WorkerContextFilter",
    "configure_logging",
    "get_worker_context",
    "worker_context",
]
