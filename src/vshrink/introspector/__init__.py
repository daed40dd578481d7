"""Media probing: ffprobe JSON to StreamMetadata."""

from vshrink.introspector.ffprobe import FFprobeIntrospector
from vshrink.introspector.interface import MediaIntrospector
from vshrink.introspector.parsers import (
    map_color_transfer,
    parse_ffprobe_output,
    stream_bitrate,
)

__all__ = [
    "FFprobeIntrospector",
    "MediaIntrospector",
    "map_color_transfer",
    "parse_ffprobe_output",
    "stream_bitrate",
]
