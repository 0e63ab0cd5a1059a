"""Per-chain timing hook."""

from __future__ import annotations

import time
from typing import Callable, Sequence

from profdag.graph import Operator
from profdag.logging import get_logger
from profdag.profiling.stats import PerOperatorTimers

logger = get_logger(__name__)


class TimedChainExecutor:
    """Run a chain of nodes and time each operator into ``PerOperatorTimers``.

    Chains of one run may execute concurrently on different threads; they
    touch disjoint node indices, so the per-node entries need no lock.

    Args:
        nodes: Operators of the graph, indexed by node index.
        timers: Per-node accumulators, one per entry of ``nodes``.
        runs: Callable returning the current run counter; runs ``<= 1`` are
            warm-up and are not timed.
        clock: Monotonic clock in seconds.
        scale: Multiplier from clock units to recorded units (milliseconds).
    """

    def __init__(
        self,
        nodes: Sequence[Operator],
        timers: PerOperatorTimers,
        runs: Callable[[], int],
        clock: Callable[[], float] = time.perf_counter,
        scale: float = 1000.0,
    ) -> None:
        self._nodes = nodes
        self._timers = timers
        self._runs = runs
        self._clock = clock
        self._scale = scale

    def run_chain(self, chain: Sequence[int]) -> bool:
        """Execute ``chain`` in order and return the AND of every operator's success.

        Raises:
            TimerLayoutError: If the timer table does not match the graph or
                the chain names an index outside it.
        """
        self._timers.check_layout(len(self._nodes))

        success = True
        if self._runs() <= 1:
            for idx in chain:
                success &= bool(self._nodes[idx].run())
            return success

        for idx in chain:
            self._timers.check_index(idx)
            start = self._clock()
            ok = bool(self._nodes[idx].run())
            spent = (self._clock() - start) * self._scale
            self._timers[idx].add(max(spent, 0.0))
            if not ok:
                logger.debug(
                    f"Operator #{idx} ({self._nodes[idx].type}) failed "
                    f"after {spent:.3f} ms"
                )
            success &= ok
        return success
