"""Per-operator timing statistics for repeated graph runs.

This package exposes the profiling building blocks used by ``ProfDAGNet``:

- ``Stats``, ``PerOperatorTimers``, ``PerTypeTimers``: online accumulators.
- ``TimedChainExecutor``: per-chain timing hook.
- ``RunAggregator``: per-run snapshot/diff into per-type statistics.
- ``StatsReporter`` and ``OperatorStat``: queries and reports.
- ``DeviceValidator``: one-time advisory placement check.
"""

from .aggregator import RunAggregator as RunAggregator
from .devices import DeviceMismatch as DeviceMismatch
from .devices import DeviceValidator as DeviceValidator
from .executor import TimedChainExecutor as TimedChainExecutor
from .reporter import OperatorStat as OperatorStat
from .reporter import StatsReporter as StatsReporter
from .reporter import to_dataframe as to_dataframe
from .stats import InsufficientDataError as InsufficientDataError
from .stats import PerOperatorTimers as PerOperatorTimers
from .stats import PerTypeTimers as PerTypeTimers
from .stats import Stats as Stats
from .stats import TimerLayoutError as TimerLayoutError
from .stats import TypeStats as TypeStats

__all__ = [
    "DeviceMismatch",
    "DeviceValidator",
    "InsufficientDataError",
    "OperatorStat",
    "PerOperatorTimers",
    "PerTypeTimers",
    "RunAggregator",
    "Stats",
    "StatsReporter",
    "TimedChainExecutor",
    "TimerLayoutError",
    "TypeStats",
    "to_dataframe",
]
