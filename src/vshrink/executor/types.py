"""Shared types for the encode executor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# x264 writes <base>-0.log and <base>-0.log.mbtree, x265 (stats=<base>.log)
# writes <base>.log and <base>.log.cutree. Both stage into .temp first.
PASS_LOG_SUFFIXES = (
    "-0.log",
    "-0.log.mbtree",
    ".log",
    ".log.cutree",
    "-0.log.temp",
    "-0.log.mbtree.temp",
    ".log.temp",
    ".log.cutree.temp",
)


@dataclass(frozen=True)
class PassLogArtifacts:
    """Pass log files produced by a two-pass encode."""

    log_file_base: Path
    """Path prefix for pass log files (the encoder adds suffixes)."""

    def paths(self) -> list[Path]:
        return [Path(f"{self.log_file_base}{suffix}") for suffix in PASS_LOG_SUFFIXES]

    def existing(self) -> list[Path]:
        return [path for path in self.paths() if path.exists()]

    def cleanup(self) -> list[Path]:
        """Remove pass log files.

        Returns:
            Files that could not be removed.
        """
        leftover: list[Path] = []
        for log_file in self.existing():
            try:
                log_file.unlink()
                logger.debug("Cleaned up pass log file: %s", log_file)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Could not clean up pass log file %s: %s", log_file, e)
                leftover.append(log_file)
        return leftover


@dataclass(frozen=True)
class EncodeResult:
    """Result of one encoder pass."""

    success: bool
    return_code: int
    stderr_tail: str = ""
    cancelled: bool = False
    elapsed_seconds: float = 0.0
