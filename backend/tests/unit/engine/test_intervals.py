"""
Unit tests for interval merge/subtract.

Property checks run over seeded random interval sets so failures are
reproducible.
"""

from datetime import datetime, timedelta
import random
from typing import List, Tuple

import pytest
import pytz

from slotengine.core.exceptions import ValidationException
from slotengine.engine.intervals import (
    Interval,
    clip_interval,
    merge_intervals,
    subtract_all,
    subtract_interval,
)

BASE = datetime(2024, 3, 4, tzinfo=pytz.UTC)


def at(minutes: int) -> datetime:
    return BASE + timedelta(minutes=minutes)


def iv(start: int, end: int, original: int = None) -> Interval:
    return Interval(at(start), at(end), at(original) if original is not None else None)


def minute_set(intervals) -> set:
    covered = set()
    for item in intervals:
        start = int((item.start - BASE).total_seconds() // 60)
        end = int((item.end - BASE).total_seconds() // 60)
        covered.update(range(start, end))
    return covered


def random_intervals(rng: random.Random, count: int) -> List[Interval]:
    result = []
    for _ in range(count):
        start = rng.randrange(0, 600)
        result.append(iv(start, start + rng.randrange(1, 120), original=start - rng.randrange(0, 30)))
    return result


class TestInterval:
    def test_rejects_empty_interval(self):
        with pytest.raises(ValidationException):
            iv(10, 10)

    def test_anchor_defaults_to_start(self):
        assert iv(10, 20).anchor == at(10)
        assert iv(10, 20, original=5).anchor == at(5)

    def test_overlap_is_half_open(self):
        assert not iv(0, 10).overlaps(iv(10, 20))
        assert iv(0, 11).overlaps(iv(10, 20))


class TestMerge:
    def test_empty_input(self):
        assert merge_intervals([]) == []

    def test_merges_overlapping_and_adjacent(self):
        merged = merge_intervals([iv(30, 60), iv(0, 30), iv(50, 90), iv(120, 150)])
        assert [(m.start, m.end) for m in merged] == [(at(0), at(90)), (at(120), at(150))]

    def test_keeps_earliest_original_start(self):
        merged = merge_intervals([iv(10, 40, original=5), iv(20, 50, original=0)])
        assert len(merged) == 1
        assert merged[0].original_start == at(0)

    @pytest.mark.parametrize("seed", range(25))
    def test_output_sorted_disjoint_and_measure_preserving(self, seed):
        rng = random.Random(seed)
        intervals = random_intervals(rng, rng.randrange(0, 12))
        merged = merge_intervals(intervals)

        for left, right in zip(merged, merged[1:]):
            # sorted, non-overlapping and non-adjacent
            assert left.end < right.start
        assert minute_set(merged) == minute_set(intervals)


class TestSubtract:
    def test_non_overlapping_kept(self):
        original = [iv(0, 30, original=0)]
        assert subtract_interval(original, iv(30, 60)) == original

    def test_split_keeps_original_start(self):
        result = subtract_interval([iv(0, 120, original=-10)], iv(40, 60))
        assert [(r.start, r.end) for r in result] == [(at(0), at(40)), (at(60), at(120))]
        assert all(r.original_start == at(-10) for r in result)

    def test_fully_covered_removed(self):
        assert subtract_interval([iv(10, 20)], iv(0, 30)) == []

    @pytest.mark.parametrize("seed", range(25))
    def test_no_overlap_and_measure_preserving(self, seed):
        rng = random.Random(1000 + seed)
        intervals = merge_intervals(random_intervals(rng, rng.randrange(1, 8)))
        start = rng.randrange(0, 600)
        removed = iv(start, start + rng.randrange(1, 200))

        result = subtract_interval(intervals, removed)

        assert not any(r.overlaps(removed) for r in result)
        assert minute_set(result) == minute_set(intervals) - minute_set([removed])

    def test_subtract_all_is_order_independent(self):
        rng = random.Random(7)
        base = [iv(0, 600)]
        bookings: List[Tuple[int, int]] = [(30, 60), (100, 130), (400, 460)]
        removals = [iv(s, e) for s, e in bookings]
        forward = subtract_all(base, removals)
        shuffled = removals[:]
        rng.shuffle(shuffled)
        assert subtract_all(base, shuffled) == forward


class TestClip:
    def test_clip_records_pre_clip_start(self):
        clipped = clip_interval(iv(0, 120), at(30), at(90))
        assert clipped == Interval(at(30), at(90), at(0))

    def test_clip_outside_returns_none(self):
        assert clip_interval(iv(0, 30), at(30), at(90)) is None
