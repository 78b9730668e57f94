"""
Timing package for SlideCast.

Uniform schedules, duration clamping and schedule-to-duration derivation.
"""

from .deriver import derive_durations
from .engine import MIN_SLIDE_SECONDS, clamp_durations_to_total, compute_uniform_schedule

__all__ = [
    "MIN_SLIDE_SECONDS",
    "clamp_durations_to_total",
    "compute_uniform_schedule",
    "derive_durations",
]
