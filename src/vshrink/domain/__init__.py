"""Domain types for transcode planning and orchestration."""

from vshrink.domain.models import (
    TERMINAL_STATES,
    AcceleratorClass,
    ColorTransfer,
    DispositionAction,
    EncodeJob,
    FilterStage,
    JobOutcome,
    OrchestratorState,
    OutcomeKind,
    StageKind,
    StreamMetadata,
)

__all__ = [
    "AcceleratorClass",
    "ColorTransfer",
    "DispositionAction",
    "EncodeJob",
    "FilterStage",
    "JobOutcome",
    "OrchestratorState",
    "OutcomeKind",
    "StageKind",
    "StreamMetadata",
    "TERMINAL_STATES",
]
