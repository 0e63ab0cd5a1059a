"""Tests for per-run aggregation into per-type statistics."""

from unittest.mock import MagicMock

import pytest

from profdag.profiling.aggregator import RunAggregator
from profdag.profiling.executor import TimedChainExecutor
from profdag.profiling.stats import (
    PerOperatorTimers,
    PerTypeTimers,
    Stats,
    TimerLayoutError,
)
from tests.conftest import scripted


class Harness:
    """Aggregator and chain hook wired together the way a net wires them."""

    def __init__(self, nodes, clock, chains, validator=None):
        self.nodes = nodes
        self.chains = chains
        self.timers = PerOperatorTimers(len(nodes))
        self.type_timers = PerTypeTimers()
        self.aggregator = RunAggregator(
            nodes, self.timers, self.type_timers, validator=validator
        )
        self.executor = TimedChainExecutor(
            nodes, self.timers, runs=lambda: self.aggregator.runs, clock=clock, scale=1.0
        )

    def run_full(self):
        success = True
        for chain in self.chains:
            success &= self.executor.run_chain(chain)
        return success

    def run(self):
        return self.aggregator.run(self.run_full)


class TestRunAggregator:
    def test_warm_up_only(self, workspace, clock):
        validator = MagicMock()
        nodes = [scripted(workspace, clock, "Add", [3.0])]
        h = Harness(nodes, clock, [[0]], validator=validator)

        assert h.run() is True
        assert h.aggregator.runs == 1
        assert h.aggregator.measured_runs == 0
        assert h.timers[0] == Stats()
        assert len(h.type_timers) == 0
        validator.validate.assert_called_once_with()

    def test_validator_runs_only_after_warm_up(self, workspace, clock):
        validator = MagicMock()
        h = Harness([scripted(workspace, clock, "A", [1.0])], clock, [[0]], validator)
        for _ in range(4):
            h.run()
        assert validator.validate.call_count == 1

    def test_per_type_total_over_instances(self, workspace, clock):
        nodes = [
            scripted(workspace, clock, "Add", [0.0, 3.0]),
            scripted(workspace, clock, "Add", [0.0, 5.0]),
        ]
        h = Harness(nodes, clock, [[0], [1]])

        h.run()
        h.run()

        entry = h.type_timers.get("Add")
        assert entry.stats.sum == 8.0
        assert entry.stats.sqrsum == 64.0
        assert entry.invocations == 2

    def test_per_type_variance_is_over_run_totals(self, workspace, clock):
        nodes = [
            scripted(workspace, clock, "Mul", [0.0, 1.0, 3.0]),
            scripted(workspace, clock, "Mul", [0.0, 3.0, 5.0]),
            scripted(workspace, clock, "Relu", [0.0, 2.0, 2.0]),
        ]
        h = Harness(nodes, clock, [[0, 1, 2]])
        for _ in range(3):
            h.run()

        mul = h.type_timers.get("Mul")
        # Run totals for Mul: 4 then 8
        assert mul.stats.sum == 12.0
        assert mul.stats.sqrsum == 80.0
        assert mul.stats.mean(2) == 6.0
        assert mul.stats.stddev(2) == 2.0
        assert mul.invocations == 4

        relu = h.type_timers.get("Relu")
        assert relu.stats.sum == 4.0
        assert relu.invocations == 2

        # Per-node entries keep cumulative values
        assert [t.sum for t in h.timers] == [4.0, 8.0, 4.0]

    def test_zero_total_type_counts_invocations_only(self, workspace, clock):
        nodes = [scripted(workspace, clock, "Noop", [0.0])]
        h = Harness(nodes, clock, [[0]])
        h.run()
        h.run()

        entry = h.type_timers.get("Noop")
        assert entry.invocations == 1
        assert entry.stats == Stats()

    def test_type_stats_count_measured_runs(self, workspace, clock):
        nodes = [scripted(workspace, clock, "A", [0.0, 2.0, 2.0])]
        h = Harness(nodes, clock, [[0]])
        for _ in range(3):
            h.run()
        entry = h.type_timers.get("A")
        assert entry.stats.sum == 4.0
        assert entry.stats.sqrsum == 8.0
        assert entry.stats.count == 2

    def test_success_flag_passes_through(self, workspace, clock):
        nodes = [scripted(workspace, clock, "A", [1.0], results=[False, True, False])]
        h = Harness(nodes, clock, [[0]])
        assert [h.run(), h.run(), h.run()] == [False, True, False]

    def test_layout_mismatch_is_fatal_after_warm_up(self, workspace, clock):
        nodes = [scripted(workspace, clock, "A", [1.0])]
        h = Harness(nodes, clock, [[0]])
        h.aggregator._timers = PerOperatorTimers(3)

        h.run()
        with pytest.raises(TimerLayoutError):
            h.run()
        assert h.aggregator.runs == 2

    def test_failed_run_still_counts(self, workspace, clock):
        h = Harness([scripted(workspace, clock, "A", [1.0])], clock, [[0]])
        h.run()

        def explode():
            raise RuntimeError("engine failure")

        with pytest.raises(RuntimeError):
            h.aggregator.run(explode)
        assert h.aggregator.runs == 2
        assert len(h.type_timers) == 0
