"""Batch result aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vshrink.domain.models import JobOutcome, OutcomeKind


@dataclass
class BatchSummary:
    """Outcomes of one batch run, in candidate order."""

    total_candidates: int = 0
    outcomes: list[JobOutcome] = field(default_factory=list)
    interrupted: bool = False
    elapsed_seconds: float = 0.0

    def _count(self, kind: OutcomeKind) -> int:
        return sum(1 for outcome in self.outcomes if outcome.kind == kind)

    @property
    def converted(self) -> int:
        return self._count(OutcomeKind.CONVERTED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeKind.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeKind.FAILED)

    @property
    def not_started(self) -> int:
        """Candidates never reached because the batch was interrupted."""
        return self.total_candidates - len(self.outcomes)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "total": self.total_candidates,
                "converted": self.converted,
                "skipped": self.skipped,
                "failed": self.failed,
                "not_started": self.not_started,
                "interrupted": self.interrupted,
                "duration_seconds": round(self.elapsed_seconds, 2),
            },
            "results": [outcome_to_dict(outcome) for outcome in self.outcomes],
        }


def _path_str(path: Path | None) -> str | None:
    return str(path) if path is not None else None


def outcome_to_dict(outcome: JobOutcome) -> dict[str, Any]:
    """JSON-ready representation of one outcome."""
    return {
        "path": str(outcome.source_path),
        "status": outcome.kind.value,
        "reason": outcome.reason,
        "stage": outcome.stage.value if outcome.stage is not None else None,
        "output": _path_str(outcome.output_path),
        "states": [state.value for state in outcome.states],
        "elapsed_seconds": round(outcome.elapsed_seconds, 2),
    }
