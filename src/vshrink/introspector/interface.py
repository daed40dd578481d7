"""MediaIntrospector interface for stream metadata extraction."""

from pathlib import Path
from typing import Protocol

from vshrink.domain.models import StreamMetadata


class MediaIntrospector(Protocol):
    """Protocol for media probe implementations.

    Implementations extract the few facts the planner needs (duration,
    non-video bitrates, height, color transfer) from a video file.
    """

    def get_metadata(self, path: Path) -> StreamMetadata:
        """Extract stream metadata from a video file.

        Raises:
            ProbeError: If the file cannot be probed or lacks required data.
        """
        ...
