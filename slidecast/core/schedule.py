"""
Per-slide schedule owned by the composition orchestrator.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from typing import Any

from slidecast.schemas.timing import SlideTiming


class Schedule:
    """Ordered set of ``SlideTiming`` keyed by ``slide_index``.

    Iteration always follows ``slide_index`` order, whatever order entries were
    added or edited in.
    """

    def __init__(self, timings: Iterable[SlideTiming] = ()) -> None:
        self._timings: dict[int, SlideTiming] = {}
        for timing in timings:
            self._timings[timing.slide_index] = timing

    def __len__(self) -> int:
        return len(self._timings)

    def __iter__(self) -> Iterator[SlideTiming]:
        return iter(self.ordered())

    def __bool__(self) -> bool:
        return bool(self._timings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schedule):
            return NotImplemented
        return self.ordered() == other.ordered()

    def __repr__(self) -> str:
        return f"Schedule({self.times()!r})"

    def ordered(self) -> list[SlideTiming]:
        return [self._timings[i] for i in sorted(self._timings)]

    def times(self) -> list[float]:
        return [t.time_seconds for t in self.ordered()]

    def get(self, slide_index: int) -> SlideTiming | None:
        return self._timings.get(slide_index)

    def set_time(self, slide_index: int, time_seconds: float) -> None:
        """Operator edit of a single slide's start time."""
        if slide_index not in self._timings:
            raise KeyError(f"No slide {slide_index} in schedule of {len(self)} slides")
        if not math.isfinite(time_seconds) or time_seconds < 0:
            raise ValueError(
                f"Slide start time must be a finite value >= 0, got {time_seconds}"
            )
        self._timings[slide_index] = SlideTiming(
            slide_index=slide_index, time_seconds=float(time_seconds)
        )

    def is_contiguous(self) -> bool:
        return sorted(self._timings) == list(range(len(self._timings)))

    def copy(self) -> Schedule:
        return Schedule(t.model_copy() for t in self.ordered())

    def as_list(self) -> list[dict[str, Any]]:
        return [t.model_dump() for t in self.ordered()]
