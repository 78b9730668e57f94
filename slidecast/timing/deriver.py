"""
Convert absolute slide start times into per-slide display durations.
"""

from __future__ import annotations

from collections.abc import Iterable

from slidecast.configs.config import config
from slidecast.schemas.timing import SlideTiming
from slidecast.timing.engine import MIN_SLIDE_SECONDS, clamp_durations_to_total


def derive_durations(
    schedule: Iterable[SlideTiming],
    fallback_tail_seconds: float | None = None,
    ceiling_seconds: float | None = None,
) -> list[float]:
    """
    Derive one display duration per slide.

    Slides are ordered by ``slide_index``, never by position in ``schedule``.
    Each slide lasts until the next one starts (at least ``MIN_SLIDE_SECONDS``);
    the last slide gets ``fallback_tail_seconds``. With a ``ceiling_seconds`` the
    result is clamped so its sum does not exceed the narration track.
    """
    if fallback_tail_seconds is None:
        fallback_tail_seconds = config.fallback_tail_seconds

    ordered = sorted(schedule, key=lambda t: t.slide_index)
    if not ordered:
        return []

    durations = [
        max(MIN_SLIDE_SECONDS, nxt.time_seconds - current.time_seconds)
        for current, nxt in zip(ordered, ordered[1:])
    ]
    durations.append(max(MIN_SLIDE_SECONDS, fallback_tail_seconds))

    if ceiling_seconds is not None:
        durations = clamp_durations_to_total(durations, ceiling_seconds)
        if sum(durations) > ceiling_seconds:
            durations = _trim_from_tail(durations, ceiling_seconds)
    return durations


def _trim_from_tail(durations: list[float], ceiling_seconds: float) -> list[float]:
    # Earlier slides already overrun the ceiling; walk backwards shortening each
    # slide down to the floor until the total fits.
    trimmed = list(durations)
    overshoot = sum(trimmed) - ceiling_seconds
    for i in range(len(trimmed) - 1, -1, -1):
        if overshoot <= 0:
            break
        available = trimmed[i] - MIN_SLIDE_SECONDS
        if available <= 0:
            continue
        cut = min(available, overshoot)
        trimmed[i] -= cut
        overshoot -= cut
    return trimmed
