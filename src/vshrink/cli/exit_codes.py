"""Process exit codes.

Codes are grouped in blocks of ten so related failures stay adjacent:
1-9 for run-level problems, 10s for bad input, 20s for the file being
worked on, 30s for missing tools, 40s for conversions that failed and
60s for health-check results.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit status of a vshrink command."""

    SUCCESS = 0

    GENERAL_ERROR = 1
    INTERRUPTED = 2

    INVALID_ARGUMENTS = 10
    CONFIG_ERROR = 11

    TARGET_NOT_FOUND = 20
    PROBE_FAILED = 21
    BUDGET_EXHAUSTED = 22

    TOOL_NOT_AVAILABLE = 30

    # At least one file in a batch failed to convert or dispose
    OPERATION_FAILED = 40

    WARNINGS = 60
    CRITICAL = 61
