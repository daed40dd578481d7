"""External tool detection for ffmpeg and ffprobe.

A configured path wins when it points at a file; otherwise the tool is
looked up on PATH.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess  # nosec B404 - subprocess is required for version checks
from dataclasses import dataclass
from pathlib import Path

from vshrink.config.models import ToolPathsConfig
from vshrink.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("ffmpeg", "ffprobe")

# Timeout for version detection commands (seconds)
DETECTION_TIMEOUT = 10

INSTALL_HINTS = {
    "ffmpeg": (
        "Install ffmpeg (e.g. 'apt install ffmpeg' or 'brew install ffmpeg') "
        "or set VSHRINK_FFMPEG_PATH."
    ),
    "ffprobe": (
        "ffprobe ships with ffmpeg; install ffmpeg or set VSHRINK_FFPROBE_PATH."
    ),
}

_VERSION_PATTERN = re.compile(r"version\s+(\S+)")


@dataclass(frozen=True)
class ToolInfo:
    """Detection result for one tool."""

    name: str
    path: Path | None = None
    version: str | None = None

    @property
    def is_available(self) -> bool:
        return self.path is not None


def find_tool(name: str, configured_path: Path | None = None) -> Path | None:
    """Find a tool executable, or None if not found."""
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", name, configured_path
        )

    which_result = shutil.which(name)
    if which_result:
        return Path(which_result)
    return None


def _configured_path(name: str, tools: ToolPathsConfig | None) -> Path | None:
    if tools is None:
        return None
    return getattr(tools, name, None)


def get_tool_path(name: str, tools: ToolPathsConfig | None = None) -> Path | None:
    """Get path to a tool, or None if not available."""
    return find_tool(name, _configured_path(name, tools))


def require_tool(name: str, tools: ToolPathsConfig | None = None) -> Path:
    """Get path to a required tool.

    Raises:
        ToolNotFoundError: If the tool is not available.
    """
    path = get_tool_path(name, tools)
    if path is None:
        raise ToolNotFoundError(name, INSTALL_HINTS.get(name, ""))
    return path


def detect_version(path: Path) -> str | None:
    """Run ``<tool> -version`` and return the version string, if any."""
    try:
        result = subprocess.run(  # nosec B603 - tool path and fixed flag
            [str(path), "-version"],
            capture_output=True,
            text=True,
            errors="replace",
            timeout=DETECTION_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Version check timed out: %s", path)
        return None
    except OSError as e:
        logger.warning("Version check failed for %s: %s", path, e)
        return None

    if result.returncode != 0:
        return None
    first_line = result.stdout.splitlines()[0] if result.stdout else ""
    match = _VERSION_PATTERN.search(first_line)
    return match.group(1) if match else None


def check_tool_availability(
    tools: ToolPathsConfig | None = None,
) -> dict[str, ToolInfo]:
    """Detect every required tool and its version."""
    report: dict[str, ToolInfo] = {}
    for name in REQUIRED_TOOLS:
        path = get_tool_path(name, tools)
        version = detect_version(path) if path is not None else None
        report[name] = ToolInfo(name=name, path=path, version=version)
    return report
