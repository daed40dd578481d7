"""Discovery of oversized video files."""

from vshrink.scanner.discovery import discover_candidates

__all__ = ["discover_candidates"]
