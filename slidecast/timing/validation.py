"""
Structural checks for slide timings handed to the compositor.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from loguru import logger

from slidecast.core.errors import TimingValidationError

if TYPE_CHECKING:
    from slidecast.schemas.timing import SlideTiming


def validate_timings(timings: Sequence[SlideTiming]) -> None:
    """Raise ``TimingValidationError`` unless indices are exactly ``0..n-1``.

    Out-of-order times are tolerated: the duration deriver floors them, so they
    only produce a warning here.
    """
    if not timings:
        raise TimingValidationError("timings must not be empty")

    ordered = sorted(timings, key=lambda t: t.slide_index)
    for expected_index, timing in enumerate(ordered):
        if timing.slide_index != expected_index:
            raise TimingValidationError(
                "slide indices must start at 0 and be contiguous"
            )

    for current, nxt in zip(ordered, ordered[1:]):
        if nxt.time_seconds <= current.time_seconds:
            logger.warning(
                f"Slide {nxt.slide_index} starts at {nxt.time_seconds}s, not after "
                f"slide {current.slide_index} ({current.time_seconds}s)"
            )
