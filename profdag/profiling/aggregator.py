"""Per-run aggregation of node timings into per-type statistics.

Each full run is wrapped by ``RunAggregator.run``. The first run is warm-up:
it is executed untimed and followed by the one-time device placement check.
For every later run the per-node table is snapshotted, the run executes (the
chain hook accumulates into the live table), and the difference in ``sum``
per node is folded into a per-type total for that run. Per-type statistics
are therefore over per-run totals, not over individual operator calls.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from profdag.graph import Operator
from profdag.logging import get_logger
from profdag.profiling.devices import DeviceValidator
from profdag.profiling.stats import PerOperatorTimers, PerTypeTimers

logger = get_logger(__name__)


class RunAggregator:
    """Wrap full graph runs and maintain the run counter and per-type timers.

    Args:
        nodes: Operators of the graph, indexed by node index.
        timers: Per-node accumulators shared with the chain hook.
        type_timers: Per-type accumulators filled by this class.
        validator: Device check run once after warm-up; ``None`` skips it.
    """

    def __init__(
        self,
        nodes: Sequence[Operator],
        timers: PerOperatorTimers,
        type_timers: PerTypeTimers,
        validator: Optional[DeviceValidator] = None,
    ) -> None:
        self._nodes = nodes
        self._timers = timers
        self._type_timers = type_timers
        self._validator = validator
        self._runs = 0

    @property
    def runs(self) -> int:
        """Full runs started, warm-up included."""
        return self._runs

    @property
    def measured_runs(self) -> int:
        return max(self._runs - 1, 0)

    def run(self, run_full: Callable[[], bool]) -> bool:
        """Execute one full run through ``run_full`` and aggregate its timings.

        Returns:
            The success flag of ``run_full``, unchanged.

        Raises:
            TimerLayoutError: If the per-node table does not match the graph.
        """
        self._runs += 1

        if self._runs <= 1:
            success = run_full()
            if self._validator is not None:
                self._validator.validate()
            logger.debug("Warm-up run finished; statistics start with the next run")
            return success

        self._timers.check_layout(len(self._nodes))

        before = self._timers.snapshot()
        success = run_full()

        run_totals: Dict[str, float] = {}
        for idx, node in enumerate(self._nodes):
            op_type = node.type
            delta = self._timers[idx].sum - before[idx].sum
            run_totals[op_type] = run_totals.get(op_type, 0.0) + delta
            self._type_timers.entry(op_type).invocations += 1

        for op_type, total in run_totals.items():
            if total:
                self._type_timers.entry(op_type).stats.add(total)

        logger.debug(
            f"Run {self._runs} aggregated: {len(run_totals)} operator types, "
            f"{sum(run_totals.values()):.3f} ms total"
        )
        return success
