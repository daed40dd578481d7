"""FFprobe-based implementation of MediaIntrospector protocol."""

import json
import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from vshrink.domain.models import StreamMetadata
from vshrink.exceptions import ProbeError
from vshrink.introspector.parsers import parse_ffprobe_output

logger = logging.getLogger(__name__)

# Probing reads headers only; a hang means a broken file or mount
PROBE_TIMEOUT_SECONDS = 60


class FFprobeIntrospector:
    """ffprobe-based implementation of MediaIntrospector protocol."""

    def __init__(self, ffprobe_path: Path) -> None:
        """Initialize the introspector.

        Args:
            ffprobe_path: Resolved path to the ffprobe executable.
        """
        self._ffprobe_path = ffprobe_path

    def get_metadata(self, path: Path) -> StreamMetadata:
        """Extract stream metadata from a video file.

        Raises:
            ProbeError: If the file cannot be probed.
        """
        if not path.exists():
            raise ProbeError(f"File not found: {path}")

        try:
            ffprobe_output = self._run_ffprobe(path)
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"ffprobe timed out for {path} after {e.timeout}s") from e
        except subprocess.CalledProcessError as e:
            raise ProbeError(f"ffprobe failed for {path}: {e.stderr or e}") from e
        except json.JSONDecodeError as e:
            raise ProbeError(f"Invalid ffprobe output for {path}: {e}") from e
        except OSError as e:
            raise ProbeError(f"Could not run ffprobe for {path}: {e}") from e

        metadata = parse_ffprobe_output(path, ffprobe_output)
        logger.debug(
            "Probed %s: %ds, %dp, %s, audio %d bps, subtitles %d bps",
            path.name,
            metadata.duration_seconds,
            metadata.source_height,
            metadata.color_transfer.value,
            metadata.audio_bitrate_bps,
            metadata.subtitle_bitrate_bps,
        )
        return metadata

    def _run_ffprobe(self, path: Path) -> dict:
        """Run ffprobe and return parsed JSON output.

        Raises:
            subprocess.CalledProcessError: If ffprobe returns non-zero.
            json.JSONDecodeError: If output is not valid JSON.
            ProbeError: If the output is not a JSON object.
        """
        result = subprocess.run(  # nosec B603 - ffprobe path is validated
            [
                str(self._ffprobe_path),
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_streams",
                "-show_format",
                str(path),
            ],
            capture_output=True,
            text=True,
            errors="replace",
            check=True,
            timeout=PROBE_TIMEOUT_SECONDS,
        )
        data = json.loads(result.stdout)
        if not isinstance(data, dict):
            raise ProbeError(f"Unexpected ffprobe output for {path}")
        return data
