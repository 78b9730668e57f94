"""
Uniform slide schedules and duration clamping.

Pure functions only; nothing here touches the filesystem or the encoder.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from slidecast.core.schedule import Schedule
from slidecast.schemas.timing import SlideTiming

# Encoders reject zero-length segments
MIN_SLIDE_SECONDS = 0.1


def compute_uniform_schedule(
    page_count: int | None, total_duration_seconds: float | None
) -> Schedule:
    """
    Split ``total_duration_seconds`` evenly across ``page_count`` slides.

    Start times are rounded to milliseconds so edited values and downstream sums
    stay stable, unless the step is too short to survive that rounding.
    Invalid input yields an empty schedule rather than an error: the schedule is
    simply not computable yet.
    """
    if isinstance(page_count, bool) or not isinstance(page_count, int):
        return Schedule()
    if page_count <= 0:
        return Schedule()
    if total_duration_seconds is None:
        return Schedule()
    try:
        total = float(total_duration_seconds)
    except (TypeError, ValueError):
        return Schedule()
    if not math.isfinite(total) or total <= 0:
        return Schedule()

    step = total / page_count
    # Rounding steps this short to milliseconds can collapse adjacent start times
    exact = step < 0.002
    return Schedule(
        SlideTiming(
            slide_index=i,
            time_seconds=i * step if exact else round(i * step, 3),
        )
        for i in range(page_count)
    )


def clamp_durations_to_total(
    durations: Sequence[float], total_seconds: float
) -> list[float]:
    """
    Pull the total back under ``total_seconds`` by shortening the last slide only.

    Earlier durations are left exactly as given. The last one never drops below
    ``MIN_SLIDE_SECONDS``. Within the ceiling the input comes back unchanged.
    """
    clamped = list(durations)
    overshoot = sum(clamped) - total_seconds
    if overshoot > 0 and clamped:
        clamped[-1] = max(MIN_SLIDE_SECONDS, clamped[-1] - overshoot)
    return clamped
