"""External tool detection."""

from vshrink.tools.detection import (
    REQUIRED_TOOLS,
    ToolInfo,
    check_tool_availability,
    detect_version,
    find_tool,
    get_tool_path,
    require_tool,
)

__all__ = [
    "REQUIRED_TOOLS",
    "ToolInfo",
    "check_tool_availability",
    "detect_version",
    "find_tool",
    "get_tool_path",
    "require_tool",
]
