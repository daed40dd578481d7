"""Exception hierarchy for vshrink.

Every per-file failure is local to that file: the batch driver reports it and
moves on. Only ToolNotFoundError and ConfigError abort a run, and both are
raised before any file is touched.
"""

from __future__ import annotations


class VShrinkError(Exception):
    """Base class for all vshrink errors."""


class ConfigError(VShrinkError):
    """Raised when configuration values or the config file are invalid."""


class ToolNotFoundError(VShrinkError):
    """Raised when a required external tool cannot be located."""

    def __init__(self, tool_name: str, hint: str = "") -> None:
        self.tool_name = tool_name
        message = f"Required tool not available: {tool_name}."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class ProbeError(VShrinkError):
    """Raised when media metadata cannot be read or is incomplete."""


class BudgetExhausted(VShrinkError):
    """Raised when the non-video streams alone exceed the size budget."""

    def __init__(
        self,
        target_total_bits: int,
        other_bitrate_bps: int,
        duration_seconds: int,
    ) -> None:
        self.target_total_bits = target_total_bits
        self.other_bitrate_bps = other_bitrate_bps
        self.duration_seconds = duration_seconds
        super().__init__(
            "Calculated target bitrate is zero or negative: "
            f"{other_bitrate_bps} bps of audio/subtitles over "
            f"{duration_seconds}s needs {other_bitrate_bps * duration_seconds} "
            f"bits of a {target_total_bits} bit budget"
        )


class EncodeFailure(VShrinkError):
    """Raised when an encoder pass exits unsuccessfully."""

    def __init__(self, pass_number: int, reason: str) -> None:
        self.pass_number = pass_number
        self.reason = reason
        super().__init__(f"Pass {pass_number} failed: {reason}")


class VerifyFailure(VShrinkError):
    """Raised when the encoded output is missing or implausibly small."""


class DisposeFailure(VShrinkError):
    """Raised when the original cannot be deleted or moved after conversion."""
