"""
Tests for deriving per-slide durations from a schedule.
"""

import pytest

from slidecast.configs.config import config
from slidecast.schemas.timing import SlideTiming
from slidecast.timing import MIN_SLIDE_SECONDS, derive_durations


def _timings(*times):
    return [SlideTiming(slide_index=i, time_seconds=t) for i, t in enumerate(times)]


def test_gaps_become_durations_with_fallback_tail():
    assert derive_durations(_timings(0, 10, 25), fallback_tail_seconds=5) == [
        10,
        15,
        5,
    ]


def test_order_follows_slide_index_not_input_order():
    timings = list(reversed(_timings(0, 10, 25)))
    assert derive_durations(timings, fallback_tail_seconds=5) == [10, 15, 5]


def test_non_increasing_times_are_floored():
    durations = derive_durations(_timings(0, 10, 8), fallback_tail_seconds=5)
    assert durations == [10, MIN_SLIDE_SECONDS, 5]


def test_tail_never_below_floor():
    durations = derive_durations(_timings(0, 10), fallback_tail_seconds=0)
    assert durations == [10, MIN_SLIDE_SECONDS]


def test_default_tail_comes_from_config(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config, "fallback_tail_seconds", 7.0)
    assert derive_durations(_timings(0, 3)) == [3, 7.0]


def test_empty_schedule():
    assert derive_durations([]) == []


def test_ceiling_shortens_last_slide():
    durations = derive_durations(
        _timings(0, 10, 25), fallback_tail_seconds=5, ceiling_seconds=27
    )
    assert durations == pytest.approx([10, 15, 2])


def test_ceiling_below_earlier_slides_trims_from_the_tail():
    durations = derive_durations(
        _timings(0, 10, 25), fallback_tail_seconds=5, ceiling_seconds=20
    )
    assert durations == pytest.approx([10, 9.9, MIN_SLIDE_SECONDS])
    assert sum(durations) == pytest.approx(20)


def test_all_durations_at_least_floor_under_tight_ceiling():
    durations = derive_durations(
        _timings(0, 20, 40, 60, 80), fallback_tail_seconds=5, ceiling_seconds=50
    )
    assert durations == pytest.approx([20, 20, 9.8, 0.1, 0.1])
    assert min(durations) >= MIN_SLIDE_SECONDS - 1e-9


def test_without_ceiling_total_may_exceed_track():
    durations = derive_durations(_timings(0, 60), fallback_tail_seconds=30)
    assert sum(durations) == 90
