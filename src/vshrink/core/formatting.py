"""Formatting and parsing utilities for sizes and bitrates.

Pure functions used by the CLI, the config loader and log messages.
"""

import re

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([kmgt]?)(i?b?)\s*$", re.IGNORECASE)

_SIZE_MULTIPLIERS = {
    "": 1,
    "k": 1024,
    "m": 1024**2,
    "g": 1024**3,
    "t": 1024**4,
}


def parse_size(value: str | int) -> int:
    """Parse a byte size such as ``16106127360``, ``"15G"`` or ``"15GiB"``.

    Unit prefixes are binary (K = 1024) whether or not the ``i`` is present,
    matching how the thresholds are expressed in GiB throughout.

    Args:
        value: Integer byte count or size string.

    Returns:
        Size in bytes.

    Raises:
        ValueError: If the value cannot be parsed or is negative.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid size: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Size must not be negative: {value}")
        return value

    match = _SIZE_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid size: {value!r}")

    number, unit, _ = match.groups()
    return int(float(number) * _SIZE_MULTIPLIERS[unit.casefold()])


def format_gib(size_bytes: int) -> str:
    """Format a byte count as GiB with two decimals (e.g. "22.47 GiB")."""
    return f"{size_bytes / 1024**3:.2f} GiB"


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes.

    Returns:
        Formatted string (e.g., "4.2 GB", "128 MB", "1.5 KB").
    """
    if size_bytes >= 1024**3:
        return f"{size_bytes / (1024**3):.1f} GB"
    elif size_bytes >= 1024**2:
        return f"{size_bytes / (1024**2):.1f} MB"
    elif size_bytes >= 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes} B"


def format_bitrate(bps: int) -> str:
    """Format bits per second as whole kilobits ("1536k")."""
    return f"{bps // 1000}k"
