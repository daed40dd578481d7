"""Bitrate budgeting, acceleration selection and encode job planning."""

from vshrink.planning.acceleration import (
    ACCELERATION_PROFILES,
    AccelerationPlan,
    AccelerationProfile,
    describe_plan,
    render_filter_chain,
    select_acceleration_plan,
)
from vshrink.planning.budget import (
    BitrateBudget,
    calculate_video_bitrate,
    round_duration_seconds,
)
from vshrink.planning.planner import (
    PlannedJob,
    derive_log_file_base,
    derive_output_path,
    plan_encode_job,
)

__all__ = [
    "ACCELERATION_PROFILES",
    "AccelerationPlan",
    "AccelerationProfile",
    "BitrateBudget",
    "PlannedJob",
    "calculate_video_bitrate",
    "derive_log_file_base",
    "derive_output_path",
    "describe_plan",
    "plan_encode_job",
    "render_filter_chain",
    "round_duration_seconds",
    "select_acceleration_plan",
]
