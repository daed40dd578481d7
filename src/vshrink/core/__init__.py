"""Shared pure helpers."""

from vshrink.core.formatting import (
    format_bitrate,
    format_file_size,
    format_gib,
    parse_size,
)

__all__ = [
    "format_bitrate",
    "format_file_size",
    "format_gib",
    "parse_size",
]
