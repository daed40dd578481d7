"""Candidate file discovery.

The whole tree is enumerated and sorted before anything is converted, so
originals moved or deleted later in the batch never disturb the walk.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from vshrink.config.models import DEFAULT_SIZE_THRESHOLD_BYTES, DEFAULT_VIDEO_EXTENSIONS

logger = logging.getLogger(__name__)


def discover_candidates(
    root: Path,
    *,
    min_size_bytes: int = DEFAULT_SIZE_THRESHOLD_BYTES,
    extensions: Iterable[str] = DEFAULT_VIDEO_EXTENSIONS,
) -> list[Path]:
    """Find video files under root larger than min_size_bytes.

    Args:
        root: Directory to search recursively.
        min_size_bytes: Files must be strictly larger than this.
        extensions: Accepted suffixes, matched case-insensitively.

    Returns:
        Sorted list of matching file paths.

    Raises:
        NotADirectoryError: If root is not a directory.
    """
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    wanted = {ext.casefold() for ext in extensions}
    candidates: list[Path] = []

    def _on_error(error: OSError) -> None:
        logger.warning("Cannot read directory %s: %s", error.filename, error)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        # Prune hidden directories in place so os.walk skips them
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]

        for name in filenames:
            if Path(name).suffix.casefold() not in wanted:
                continue
            path = Path(dirpath) / name
            try:
                if path.is_symlink():
                    continue
                size = path.stat().st_size
            except OSError as e:
                logger.warning("Cannot stat %s: %s", path, e)
                continue
            if size > min_size_bytes:
                candidates.append(path)

    candidates.sort()
    logger.info(
        "Found %d file(s) larger than %d bytes under %s",
        len(candidates),
        min_size_bytes,
        root,
    )
    return candidates
