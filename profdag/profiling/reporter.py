"""Queries and reports over accumulated operator timings.

All figures are derived from the accumulated ``Stats``, dividing by the number
of measured runs (runs after warm-up). With no measured run the queries return
empty lists and the reports say there is no data.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Sequence

import pandas as pd

from profdag.graph import Operator
from profdag.logging import get_logger
from profdag.profiling.stats import PerOperatorTimers, PerTypeTimers, Stats

logger = get_logger(__name__)

INSUFFICIENT_DATA_MESSAGE = "Insufficient runs to produce meaningful data."


@dataclass(frozen=True)
class OperatorStat:
    """Mean and standard deviation of an operator or operator type, in ms/iter.

    Attributes:
        name: Operator type, or ``<net>___<index>___<type>`` for a single node.
        mean: Mean time per measured run.
        stddev: Standard deviation across measured runs.
    """

    name: str
    mean: float
    stddev: float

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def to_dataframe(records: Sequence[OperatorStat]) -> pd.DataFrame:
    """Return ``records`` as a DataFrame with ``name``, ``mean`` and ``stddev`` columns."""
    return pd.DataFrame(
        [record.to_dict() for record in records], columns=["name", "mean", "stddev"]
    )


class StatsReporter:
    """Read-only view over the profiling state of one net.

    Args:
        net_name: Name of the profiled graph.
        nodes: Operators of the graph, indexed by node index.
        timers: Per-node accumulators.
        type_timers: Per-type accumulators.
        runs: Callable returning the run counter, warm-up included.
        unnamed_label: Label for operators with neither a name nor an output.
    """

    def __init__(
        self,
        net_name: str,
        nodes: Sequence[Operator],
        timers: PerOperatorTimers,
        type_timers: PerTypeTimers,
        runs: Callable[[], int],
        unnamed_label: str = "NO_OUTPUT",
    ) -> None:
        self.net_name = net_name
        self._nodes = nodes
        self._timers = timers
        self._type_timers = type_timers
        self._runs = runs
        self._unnamed_label = unnamed_label

    @property
    def measured_runs(self) -> int:
        return max(self._runs() - 1, 0)

    def _stat(self, name: str, stats: Stats) -> OperatorStat:
        n = self.measured_runs
        return OperatorStat(name=name, mean=stats.mean(n), stddev=stats.stddev(n))

    def get_operator_stats(self) -> List[OperatorStat]:
        """Return per-type statistics in first-seen type order."""
        if self.measured_runs < 1:
            return []
        return [
            self._stat(op_type, entry.stats)
            for op_type, entry in self._type_timers.items()
        ]

    def get_per_operator_cost(self) -> List[OperatorStat]:
        """Return per-node statistics keyed ``<net>___<index>___<type>``.

        Raises:
            TimerLayoutError: If the per-node table does not match the graph.
        """
        self._timers.check_layout(len(self._nodes))
        if self.measured_runs < 1:
            return []
        return [
            self._stat(f"{self.net_name}___{idx}___{node.type}", self._timers[idx])
            for idx, node in enumerate(self._nodes)
        ]

    def display_label(self, node: Operator) -> str:
        """Return the operator name, else its first output, else the placeholder."""
        if node.name:
            return node.name
        if node.output_size:
            return node.definition.outputs[0]
        return self._unnamed_label

    def print_stats(self) -> None:
        """Log per-node statistics at DEBUG and per-type statistics at INFO."""
        measured = self.measured_runs
        if measured < 1:
            logger.info(INSUFFICIENT_DATA_MESSAGE)
            return

        self._timers.check_layout(len(self._nodes))

        for idx, node in enumerate(self._nodes):
            stats = self._timers[idx]
            logger.debug(
                f"Op #{idx} ({self.display_label(node)}, {node.type}) "
                f"{stats.mean(measured)} ms/iter ({stats.stddev(measured)} ms/iter)"
            )

        logger.info("Time per operator type:")
        for op_type, entry in self._type_timers.items():
            logger.info(
                f"{entry.stats.mean(measured):>10.4f} ms/iter "
                f"({entry.stats.stddev(measured):>10.4f} ms/iter)  "
                f"Count per iter: {entry.invocations / measured:g}  {op_type}"
            )

    def generate_report(self) -> str:
        """Render a plain-text report of per-type and per-node statistics."""
        measured = self.measured_runs
        if measured < 1:
            return INSUFFICIENT_DATA_MESSAGE

        lines = [
            "=" * 80,
            f"OPERATOR PROFILE: {self.net_name}",
            "=" * 80,
            f"Measured runs: {measured}",
            "",
            "1. TIME PER OPERATOR TYPE",
            "-" * 40,
        ]
        type_rows = [
            [
                op_type,
                f"{entry.stats.mean(measured):.4f}",
                f"{entry.stats.stddev(measured):.4f}",
                f"{entry.invocations / measured:g}",
            ]
            for op_type, entry in self._type_timers.items()
        ]
        lines.extend(
            _format_table(["Type", "Mean (ms)", "Stddev (ms)", "Count/iter"], type_rows)
        )

        lines.extend(["", "2. TIME PER OPERATOR", "-" * 40])
        node_rows = [
            [
                str(idx),
                self.display_label(node),
                node.type,
                f"{self._timers[idx].mean(measured):.4f}",
                f"{self._timers[idx].stddev(measured):.4f}",
            ]
            for idx, node in enumerate(self._nodes)
        ]
        lines.extend(
            _format_table(["#", "Label", "Type", "Mean (ms)", "Stddev (ms)"], node_rows)
        )
        lines.extend(["", "=" * 80])
        return "\n".join(lines)


def _format_table(headers: List[str], rows: List[List[str]]) -> List[str]:
    """Return left-aligned table lines for ``headers`` and ``rows``."""
    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(cell))

    separator = "  "
    header_line = separator.join(h.ljust(col_widths[i]) for i, h in enumerate(headers))
    lines = [header_line, "-" * len(header_line)]
    for row in rows:
        lines.append(
            separator.join(cell.ljust(col_widths[i]) for i, cell in enumerate(row))
        )
    return lines
