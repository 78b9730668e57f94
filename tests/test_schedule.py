"""
Tests for the Schedule container and the progress counter.
"""

import pytest

from slidecast.core.progress import ProgressCounter, units_for_pages
from slidecast.core.schedule import Schedule
from slidecast.schemas.timing import SlideTiming


@pytest.fixture
def schedule():
    return Schedule(
        [
            SlideTiming(slide_index=2, time_seconds=20.0),
            SlideTiming(slide_index=0, time_seconds=0.0),
            SlideTiming(slide_index=1, time_seconds=10.0),
        ]
    )


class TestSchedule:
    """Test cases for Schedule."""

    def test_iterates_in_index_order(self, schedule):
        assert [t.slide_index for t in schedule] == [0, 1, 2]
        assert schedule.times() == [0.0, 10.0, 20.0]

    def test_set_time_replaces_entry(self, schedule):
        schedule.set_time(1, 12.5)
        assert schedule.get(1).time_seconds == 12.5
        assert len(schedule) == 3

    def test_set_time_unknown_index(self, schedule):
        with pytest.raises(KeyError):
            schedule.set_time(5, 1.0)

    def test_set_time_negative(self, schedule):
        with pytest.raises(ValueError):
            schedule.set_time(0, -1.0)

    @pytest.mark.parametrize("value", [float("inf"), float("nan"), float("-inf")])
    def test_set_time_non_finite(self, schedule, value):
        with pytest.raises(ValueError, match="finite"):
            schedule.set_time(1, value)
        assert schedule.get(1).time_seconds == 10.0

    def test_copy_is_independent(self, schedule):
        snapshot = schedule.copy()
        schedule.set_time(2, 30.0)
        assert snapshot.times() == [0.0, 10.0, 20.0]
        assert snapshot != schedule

    def test_equality(self, schedule):
        assert schedule == schedule.copy()
        assert Schedule() == Schedule()

    def test_contiguity(self, schedule):
        assert schedule.is_contiguous()
        gapped = Schedule([SlideTiming(slide_index=1, time_seconds=0.0)])
        assert not gapped.is_contiguous()

    def test_as_list(self, schedule):
        assert schedule.as_list()[0] == {"slide_index": 0, "time_seconds": 0.0}


class TestProgressCounter:
    """Test cases for ProgressCounter."""

    def test_units_for_pages(self):
        assert units_for_pages(5) == 7
        assert units_for_pages(0) == 2

    def test_reset_and_advance(self):
        progress = ProgressCounter()
        progress.reset(7)
        progress.advance()
        progress.advance(2)
        assert progress.completed_units == 3
        assert progress.total_units == 7
        assert progress.percentage == 42

    def test_advance_clamped_to_total(self):
        progress = ProgressCounter()
        progress.reset(3)
        progress.advance(10)
        assert progress.completed_units == 3

    def test_reset_clears_completed(self):
        progress = ProgressCounter(completed_units=4, total_units=4)
        progress.reset(6)
        assert progress.completed_units == 0

    def test_complete(self):
        progress = ProgressCounter()
        progress.reset(7)
        progress.complete()
        assert progress.percentage == 100
        assert str(progress) == "7/7 (100%)"

    def test_empty_total(self):
        assert ProgressCounter().percentage == 0
