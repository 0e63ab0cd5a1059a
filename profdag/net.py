"""Executable nets and the registry used to select them by name.

``"dag"`` selects ``DAGNet``, which runs a graph on an engine unchanged.
``"prof_dag"`` selects ``ProfDAGNet``, which wraps the same engine contract
with the profiling layer and reports statistics when closed.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type

from profdag.config import PROFILER_CONFIG, ProfilerConfig
from profdag.engine import DAGEngine, ExecutionEngine
from profdag.graph import Graph
from profdag.logging import get_logger
from profdag.profiling import (
    DeviceValidator,
    OperatorStat,
    PerOperatorTimers,
    PerTypeTimers,
    RunAggregator,
    StatsReporter,
    TimedChainExecutor,
)

logger = get_logger(__name__)

# Registry for net classes
NET_REGISTRY: Dict[str, Type["Net"]] = {}


def register_net(net_type: str):
    """Return a decorator that registers a ``Net`` subclass.

    Args:
        net_type: Registry key used by ``create_net``.

    Returns:
        A class decorator that adds the class to ``NET_REGISTRY``.
    """

    def decorator(cls: Type["Net"]) -> Type["Net"]:
        NET_REGISTRY[net_type] = cls
        return cls

    return decorator


class Net(ABC):
    """A graph bound to an execution engine.

    Args:
        graph: Graph to execute.
        config: Net configuration; defaults to ``PROFILER_CONFIG``.
        engine: Engine to run on; defaults to a ``DAGEngine`` over ``graph``.
    """

    def __init__(
        self,
        graph: Graph,
        config: Optional[ProfilerConfig] = None,
        engine: Optional[ExecutionEngine] = None,
    ) -> None:
        self.graph = graph
        self.name = graph.name
        self.config = config or PROFILER_CONFIG
        self.engine: ExecutionEngine = engine or DAGEngine(
            graph, max_workers=self.config.max_workers
        )

    @abstractmethod
    def run(self) -> bool:
        """Execute the graph once and return whether every operator succeeded."""

    def close(self) -> None:
        """Release the net; the base implementation does nothing."""

    def __enter__(self) -> "Net":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


@register_net("dag")
class DAGNet(Net):
    """Plain net: delegates every run to the engine."""

    def run(self) -> bool:
        return self.engine.run()


@register_net("prof_dag")
class ProfDAGNet(Net):
    """Net that measures per-operator and per-type cost across runs.

    The first run is warm-up and is not measured. ``get_operator_stats`` and
    ``get_per_operator_cost`` can be queried at any time; ``close`` logs the
    full report once.

    Args:
        graph: Graph to execute.
        config: Net configuration; defaults to ``PROFILER_CONFIG``.
        engine: Engine to wrap; defaults to a ``DAGEngine`` over ``graph``.
        clock: Monotonic clock in seconds used for operator timing.
    """

    def __init__(
        self,
        graph: Graph,
        config: Optional[ProfilerConfig] = None,
        engine: Optional[ExecutionEngine] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        super().__init__(graph, config, engine)
        logger.debug(f"Constructing ProfDAGNet {self.name}")

        nodes = self.engine.nodes
        self.timers = PerOperatorTimers(self.engine.node_count)
        self.type_timers = PerTypeTimers()
        self.aggregator = RunAggregator(
            nodes, self.timers, self.type_timers, validator=DeviceValidator(nodes)
        )
        self.executor = TimedChainExecutor(
            nodes,
            self.timers,
            runs=lambda: self.aggregator.runs,
            clock=clock,
            scale=self.config.time_unit_scale,
        )
        self.reporter = StatsReporter(
            self.name,
            nodes,
            self.timers,
            self.type_timers,
            runs=lambda: self.aggregator.runs,
            unnamed_label=self.config.unnamed_label,
        )
        self._closed = False

    @property
    def runs(self) -> int:
        return self.aggregator.runs

    @property
    def measured_runs(self) -> int:
        return self.aggregator.measured_runs

    def run_chain(self, chain: List[int]) -> bool:
        """Run one chain through the timing hook."""
        return self.executor.run_chain(chain)

    def run(self) -> bool:
        return self.aggregator.run(
            lambda: self.engine.run(run_chain=self.executor.run_chain)
        )

    def get_operator_stats(self) -> List[OperatorStat]:
        return self.reporter.get_operator_stats()

    def get_per_operator_cost(self) -> List[OperatorStat]:
        return self.reporter.get_per_operator_cost()

    def generate_report(self) -> str:
        return self.reporter.generate_report()

    def close(self) -> None:
        """Log the teardown report; later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Closing ProfDAGNet {self.name}")
        if self.config.report_on_close:
            self.reporter.print_stats()


def create_net(graph: Graph, net_type: str = "dag", **kwargs: Any) -> Net:
    """Instantiate the net registered as ``net_type`` for ``graph``.

    Args:
        graph: Graph to execute.
        net_type: Registry key, e.g. ``"dag"`` or ``"prof_dag"``.
        **kwargs: Extra constructor arguments for the net class.

    Returns:
        The constructed net.

    Raises:
        ValueError: If ``net_type`` is not registered.
    """
    cls = NET_REGISTRY.get(net_type)
    if cls is None:
        known = ", ".join(sorted(NET_REGISTRY))
        raise ValueError(f"Unknown net type '{net_type}'. Registered: {known}")
    return cls(graph, **kwargs)
