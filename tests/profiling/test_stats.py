"""Tests for the online timing accumulators."""

import math

import pytest

from profdag.profiling.stats import (
    InsufficientDataError,
    PerOperatorTimers,
    PerTypeTimers,
    Stats,
    TimerLayoutError,
    TypeStats,
)


class TestStats:
    def test_starts_zeroed(self):
        stats = Stats()
        assert (stats.sum, stats.sqrsum, stats.count) == (0.0, 0.0, 0)

    def test_add_accumulates_sum_and_squares(self):
        stats = Stats()
        stats.add(4.0)
        stats.add(6.0)
        assert stats.sum == 10.0
        assert stats.sqrsum == 52.0
        assert stats.count == 2
        assert stats.mean() == 5.0
        assert stats.stddev() == 1.0

    def test_explicit_divisor(self):
        stats = Stats(sum=10.0, sqrsum=52.0, count=7)
        assert stats.mean(2) == 5.0
        assert stats.stddev(2) == 1.0

    def test_zero_divisor_is_guarded(self):
        stats = Stats()
        with pytest.raises(InsufficientDataError):
            stats.mean()
        with pytest.raises(InsufficientDataError):
            stats.stddev()
        with pytest.raises(InsufficientDataError):
            Stats(sum=1.0, sqrsum=1.0, count=1).mean(0)

    def test_rounding_never_yields_nan(self):
        stats = Stats()
        for _ in range(3):
            stats.add(0.1)
        assert not math.isnan(stats.stddev())
        assert stats.stddev() == pytest.approx(0.0, abs=1e-7)

    def test_negative_sample_rejected(self):
        with pytest.raises(ValueError):
            Stats().add(-1.0)

    def test_copy_is_independent(self):
        stats = Stats()
        stats.add(2.0)
        snapshot = stats.copy()
        stats.add(3.0)
        assert snapshot.sum == 2.0
        assert snapshot.count == 1


class TestPerOperatorTimers:
    @pytest.mark.parametrize("node_count", [0, 1, 5])
    def test_construction_sizes_and_zeroes(self, node_count):
        timers = PerOperatorTimers(node_count)
        assert len(timers) == node_count
        assert all(stats == Stats() for stats in timers)

    def test_negative_node_count(self):
        with pytest.raises(ValueError):
            PerOperatorTimers(-1)

    def test_snapshot_is_deep(self):
        timers = PerOperatorTimers(2)
        timers[0].add(1.0)
        snapshot = timers.snapshot()
        timers[0].add(2.0)
        assert snapshot[0].sum == 1.0
        assert timers[0].sum == 3.0

    def test_check_layout(self):
        timers = PerOperatorTimers(3)
        timers.check_layout(3)
        with pytest.raises(TimerLayoutError, match="Data collected for 3 ops, expected 4 ops"):
            timers.check_layout(4)

    def test_check_index(self):
        timers = PerOperatorTimers(2)
        timers.check_index(1)
        with pytest.raises(TimerLayoutError, match="op #2"):
            timers.check_index(2)
        with pytest.raises(TimerLayoutError):
            timers.check_index(-1)


class TestPerTypeTimers:
    def test_entries_created_lazily_in_first_seen_order(self):
        timers = PerTypeTimers()
        assert len(timers) == 0
        assert timers.get("Add") is None

        add = timers.entry("Add")
        timers.entry("Mul")
        assert timers.entry("Add") is add
        assert "Add" in timers
        assert [name for name, _ in timers.items()] == ["Add", "Mul"]
        assert add == TypeStats()
