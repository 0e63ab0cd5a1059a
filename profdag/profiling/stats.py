"""Online timing accumulators.

``Stats`` keeps ``sum``, ``sqrsum`` and ``count`` of a timing series so mean
and standard deviation can be derived without retaining samples.
``PerOperatorTimers`` holds one ``Stats`` per graph node; ``PerTypeTimers``
maps operator type names to ``TypeStats`` entries created on first use.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Tuple


class TimerLayoutError(RuntimeError):
    """Per-node timer table no longer matches the graph it was built for."""


class InsufficientDataError(ValueError):
    """A statistic was requested over fewer than one sample."""


@dataclass
class Stats:
    """Accumulator of a scalar timing series.

    Attributes:
        sum: Sum of samples.
        sqrsum: Sum of squared samples.
        count: Number of samples folded in.
    """

    sum: float = 0.0
    sqrsum: float = 0.0
    count: int = 0

    def add(self, value: float) -> None:
        """Fold one non-negative sample into the accumulator."""
        if value < 0:
            raise ValueError(f"Timing samples must be non-negative, got {value}")
        self.sum += value
        self.sqrsum += value * value
        self.count += 1

    def mean(self, n: Optional[int] = None) -> float:
        """Return ``sum / n`` (``n`` defaults to ``count``).

        Raises:
            InsufficientDataError: If the divisor is below 1.
        """
        divisor = self.count if n is None else n
        if divisor < 1:
            raise InsufficientDataError(
                f"Cannot derive mean over {divisor} samples"
            )
        return self.sum / divisor

    def stddev(self, n: Optional[int] = None) -> float:
        """Return ``sqrt(sqrsum / n - mean**2)`` (``n`` defaults to ``count``).

        Rounding can push the variance slightly below zero; it is clamped.

        Raises:
            InsufficientDataError: If the divisor is below 1.
        """
        divisor = self.count if n is None else n
        mean = self.mean(divisor)
        variance = self.sqrsum / divisor - mean * mean
        return math.sqrt(max(variance, 0.0))

    def copy(self) -> "Stats":
        return replace(self)


@dataclass
class TypeStats:
    """Per-type accumulator of per-run totals.

    Attributes:
        stats: Per-run aggregate cost of all instances of the type.
        invocations: Node instances of the type summed over measured runs.
    """

    stats: Stats = field(default_factory=Stats)
    invocations: int = 0


class PerOperatorTimers:
    """Fixed-length table of ``Stats``, one per node index."""

    def __init__(self, node_count: int) -> None:
        if node_count < 0:
            raise ValueError(f"node_count must be >= 0, got {node_count}")
        self._timers: List[Stats] = [Stats() for _ in range(node_count)]

    def __len__(self) -> int:
        return len(self._timers)

    def __getitem__(self, index: int) -> Stats:
        return self._timers[index]

    def __iter__(self) -> Iterator[Stats]:
        return iter(self._timers)

    def snapshot(self) -> List[Stats]:
        """Return a deep copy of every entry."""
        return [stats.copy() for stats in self._timers]

    def check_layout(self, node_count: int) -> None:
        """Raise ``TimerLayoutError`` unless the table has ``node_count`` entries."""
        if len(self._timers) != node_count:
            raise TimerLayoutError(
                f"Data collected for {len(self._timers)} ops, "
                f"expected {node_count} ops."
            )

    def check_index(self, index: int) -> None:
        if not 0 <= index < len(self._timers):
            raise TimerLayoutError(
                f"Expecting {len(self._timers)} ops, but op #{index} was given."
            )


class PerTypeTimers:
    """Operator type name to ``TypeStats``, in first-seen order."""

    def __init__(self) -> None:
        self._entries: Dict[str, TypeStats] = {}

    def entry(self, op_type: str) -> TypeStats:
        """Return the entry for ``op_type``, creating it if needed."""
        entry = self._entries.get(op_type)
        if entry is None:
            entry = self._entries[op_type] = TypeStats()
        return entry

    def get(self, op_type: str) -> Optional[TypeStats]:
        return self._entries.get(op_type)

    def items(self) -> List[Tuple[str, TypeStats]]:
        return list(self._entries.items())

    def __contains__(self, op_type: object) -> bool:
        return op_type in self._entries

    def __len__(self) -> int:
        return len(self._entries)
