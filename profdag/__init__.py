"""profdag: per-operator profiling for repeated DAG executions.

profdag runs graphs of discrete operators on a threaded DAG engine and, when
the ``prof_dag`` net type is selected, measures the wall-clock cost of every
operator and operator type across repeated runs.

Primary API:
    create_net() - Instantiate a registered net type for a graph
    ProfDAGNet - Profiling net; query with get_operator_stats() and
        get_per_operator_cost()
    Graph, Operator, Workspace - Graph model consumed by nets

Example:
    from profdag import Graph, Workspace, create_net, make_operator

    ws = Workspace()
    ws.create_blob("x", 1)
    graph = Graph("demo")
    graph.add(make_operator(ws, "Double", double, inputs=["x"], outputs=["y"]))

    with create_net(graph, "prof_dag") as net:
        for _ in range(10):
            net.run()
        print(net.get_operator_stats())
"""

from __future__ import annotations

from . import logging
from ._version import __version__
from .config import PROFILER_CONFIG, ProfilerConfig, load_config
from .device import Device, DeviceType
from .engine import DAGEngine, ExecutionEngine
from .graph import FunctionOperator, Graph, Operator, OperatorDef, make_operator
from .net import NET_REGISTRY, DAGNet, Net, ProfDAGNet, create_net, register_net
from .profiling import OperatorStat, StatsReporter, to_dataframe
from .workspace import Blob, Workspace

__all__ = [
    "__version__",
    "logging",
    "Blob",
    "DAGEngine",
    "DAGNet",
    "Device",
    "DeviceType",
    "ExecutionEngine",
    "FunctionOperator",
    "Graph",
    "NET_REGISTRY",
    "Net",
    "Operator",
    "OperatorDef",
    "OperatorStat",
    "PROFILER_CONFIG",
    "ProfDAGNet",
    "ProfilerConfig",
    "StatsReporter",
    "Workspace",
    "create_net",
    "load_config",
    "make_operator",
    "register_net",
    "to_dataframe",
]
