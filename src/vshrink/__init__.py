"""vshrink: shrink oversized video files to a target container size.

Computes a video bitrate budget from the target size, the source duration and
the cost of the streams that are copied through, then drives a two-pass
ffmpeg encode and disposes of the original once the result is verified.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
