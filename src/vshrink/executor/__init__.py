"""Encoder invocation, disposition and two-pass orchestration."""

from vshrink.executor.command import EncodeCommand, EncodeCommandBuilder
from vshrink.executor.disposition import (
    DispositionErrorType,
    DispositionExecutor,
    DispositionResult,
)
from vshrink.executor.encoder import Encoder, FFmpegEncoder
from vshrink.executor.orchestrator import (
    TRANSITIONS,
    Disposer,
    StateTracker,
    TwoPassOrchestrator,
)
from vshrink.executor.types import EncodeResult, PassLogArtifacts

__all__ = [
    "Disposer",
    "DispositionErrorType",
    "DispositionExecutor",
    "DispositionResult",
    "EncodeCommand",
    "EncodeCommandBuilder",
    "EncodeResult",
    "Encoder",
    "FFmpegEncoder",
    "PassLogArtifacts",
    "StateTracker",
    "TRANSITIONS",
    "TwoPassOrchestrator",
]
